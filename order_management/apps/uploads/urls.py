from django.urls import path
from . import views

urlpatterns = [
    path('', views.ImageUploadView.as_view(), name='upload-create'),
    path('<str:filename>', views.UploadedImageView.as_view(), name='upload-detail'),
]
