from django.contrib import admin

from .models import StudentProgress, StudentXP

admin.site.register(StudentProgress)
admin.site.register(StudentXP)
