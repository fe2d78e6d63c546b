import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0002_attendancerecord'),
        ('core', '0001_initial'),
        ('students', '0001_initial'),
        ('teachers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='GradeScale',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('min_percentage', models.DecimalField(decimal_places=2, help_text='Lowest percentage in this band (inclusive)', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('max_percentage', models.DecimalField(decimal_places=2, help_text='Highest percentage in this band (inclusive)', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('grade_label', models.CharField(help_text='Grade label (e.g., A1, B2, C6)', max_length=10, unique=True)),
                ('interpretation', models.CharField(blank=True, help_text='Grade interpretation (e.g., Excellent, Very Good, Credit, Pass, Fail)', max_length=50)),
            ],
            options={
                'verbose_name': 'Grade Scale',
                'verbose_name_plural': 'Grade Scales',
                'db_table': 'grade_scale',
                'ordering': ['-min_percentage'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='CommentBand',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('min_percentage', models.DecimalField(decimal_places=2, help_text='Lowest percentage in this band (inclusive)', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('max_percentage', models.DecimalField(decimal_places=2, help_text='Highest percentage in this band (inclusive)', max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('kind', models.CharField(choices=[('class_teacher', 'Class Teacher'), ('head_teacher', 'Head Teacher')], db_index=True, max_length=20)),
                ('comment', models.TextField()),
                ('teacher', models.ForeignKey(blank=True, help_text='Teacher who wrote the remark', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='comment_bands', to='teachers.teacher')),
            ],
            options={
                'verbose_name': 'Comment Band',
                'verbose_name_plural': 'Comment Bands',
                'ordering': ['-min_percentage'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='Exam',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('exam_type', models.CharField(choices=[('BOT', 'Beginning of Term'), ('MID', 'Mid-Term'), ('END', 'End of Term')], max_length=3)),
                ('name', models.CharField(blank=True, max_length=100)),
                ('total_marks', models.PositiveIntegerField(default=100, validators=[django.core.validators.MinValueValidator(1)])),
                ('date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('class_assigned', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='exams', to='academics.class')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='exams', to='academics.subject')),
                ('term', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='exams', to='core.term')),
            ],
            options={
                'ordering': ['term', 'class_assigned', 'subject', 'exam_type'],
                'indexes': [models.Index(fields=['term', 'class_assigned'], name='exam_term_class_idx')],
            },
        ),
        migrations.CreateModel(
            name='ExamResult',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('marks_obtained', models.DecimalField(decimal_places=2, max_digits=6, validators=[django.core.validators.MinValueValidator(0)])),
                ('grade', models.CharField(blank=True, help_text='Overrides the looked-up grade when set', max_length=10)),
                ('remarks', models.CharField(blank=True, max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('exam', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='gradebook.exam')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='exam_results', to='students.student')),
            ],
            options={
                'ordering': ['created_at'],
                'unique_together': {('exam', 'student')},
            },
        ),
    ]
