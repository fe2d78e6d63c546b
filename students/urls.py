from django.urls import path
from . import views

app_name = 'students'

urlpatterns = [
    path('students/', views.student_list, name='student_list'),
    path('students/<int:pk>/', views.student_detail, name='student_detail'),
    path('students/<int:pk>/conduct/', views.update_conduct, name='update_conduct'),
    path('parents/', views.guardian_list, name='guardian_list'),
    path('parents/<int:pk>/', views.guardian_detail, name='guardian_detail'),
]
