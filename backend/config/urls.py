from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/integrity-advocate/', include('integrity_advocate.urls')),
]
