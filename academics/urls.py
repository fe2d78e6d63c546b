from django.urls import path
from . import views

app_name = 'academics'

urlpatterns = [
    path('classes/', views.class_list, name='class_list'),
    path('classes/<int:pk>/', views.class_detail, name='class_detail'),
    path('classes/<int:pk>/subjects/', views.class_subjects, name='class_subjects'),
    path('classes/<int:pk>/subjects/<int:subject_pk>/', views.class_subject_detail, name='class_subject_detail'),
    path('classes/<int:pk>/students/', views.class_students, name='class_students'),
    path('subjects/', views.subject_list, name='subject_list'),
    path('subjects/<int:pk>/', views.subject_detail, name='subject_detail'),
    path('attendance/', views.attendance, name='attendance'),
]
