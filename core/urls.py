from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    path('academic-years/', views.academic_years, name='academic_years'),
    path('terms/', views.term_list, name='term_list'),
    path('terms/<int:pk>/', views.term_detail, name='term_detail'),
]
