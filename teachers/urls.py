from django.urls import path
from . import views

app_name = 'teachers'

urlpatterns = [
    path('teachers/', views.teacher_list, name='teacher_list'),
    path('teachers/<uuid:pk>/', views.teacher_detail, name='teacher_detail'),
]
