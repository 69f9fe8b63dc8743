from django.contrib import admin

from .models import Course, Module, Lesson, Exercise

admin.site.register(Course)
admin.site.register(Module)
admin.site.register(Lesson)
admin.site.register(Exercise)
