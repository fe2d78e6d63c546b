from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Student, Guardian


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('admission_number', 'full_name', 'current_class', 'gender', 'status')
    list_filter = ('status', 'gender', 'current_class')
    search_fields = ('admission_number', 'first_name', 'last_name', 'other_names')
    list_select_related = ('current_class',)
    raw_id_fields = ('user',)

    fieldsets = (
        (None, {'fields': ('first_name', 'other_names', 'last_name', 'gender', 'date_of_birth', 'photo')}),
        (_('Admission'), {'fields': ('admission_number', 'admission_date', 'current_class', 'status', 'user')}),
        (_('Conduct'), {'fields': ('discipline', 'time_management', 'smartness', 'attendance_remarks')}),
    )


@admin.register(Guardian)
class GuardianAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'relationship', 'phone_number', 'user')
    search_fields = ('full_name', 'user__email', 'students__admission_number')
    filter_horizontal = ('students',)
    raw_id_fields = ('user',)
