from django.urls import path
from . import views

app_name = 'gradebook'

urlpatterns = [
    # Setup
    path('gradings/', views.grading_list, name='grading_list'),
    path('gradings/<int:pk>/', views.grading_detail, name='grading_detail'),
    path('comments/<str:kind>/', views.comment_list, name='comment_list'),
    path('comments/<str:kind>/<int:pk>/', views.comment_detail, name='comment_detail'),

    # Exams and marks
    path('exams/', views.exam_list, name='exam_list'),
    path('exams/<int:pk>/', views.exam_detail, name='exam_detail'),
    path('exams/<int:pk>/marks/', views.exam_marks, name='exam_marks'),

    # Report cards
    path('students/<int:pk>/report-card/', views.student_report_card, name='student_report_card'),
    path('classes/<int:pk>/report-cards/', views.class_report_cards, name='class_report_cards'),
    path('classes/<int:pk>/report-cards/export/', views.class_report_export, name='class_report_export'),
]
