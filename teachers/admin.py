from django.contrib import admin

from .models import Teacher


@admin.register(Teacher)
class TeacherAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'staff_id', 'title', 'phone_number', 'status')
    list_filter = ('status', 'gender')
    search_fields = ('first_name', 'last_name', 'staff_id', 'email')
    raw_id_fields = ('user',)
