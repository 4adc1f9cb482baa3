from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'blocks', views.IntegrityAdvocateBlockViewSet)

urlpatterns = [
    path('', include(router.urls)),
    path('override/', views.SetOverrideView.as_view(), name='set-override'),
]
