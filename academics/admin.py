from django.contrib import admin

from .models import Class, Subject, ClassSubject


class ClassSubjectInline(admin.TabularInline):
    model = ClassSubject
    extra = 1
    autocomplete_fields = ('subject', 'teacher')


@admin.register(Class)
class ClassAdmin(admin.ModelAdmin):
    inlines = [ClassSubjectInline]

    list_display = ('name', 'level_type', 'level_number', 'section', 'class_teacher', 'is_active')
    list_filter = ('level_type', 'is_active')
    search_fields = ('name',)
    readonly_fields = ('name', 'created_at', 'updated_at')


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ('name', 'short_name', 'is_core', 'is_active')
    list_filter = ('is_core', 'is_active')
    search_fields = ('name', 'short_name')


@admin.register(ClassSubject)
class ClassSubjectAdmin(admin.ModelAdmin):
    list_display = ('subject', 'class_assigned', 'teacher')
    list_filter = ('class_assigned',)
    list_select_related = ('subject', 'class_assigned', 'teacher')
