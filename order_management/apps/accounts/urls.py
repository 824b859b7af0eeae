from django.urls import path
from . import views

urlpatterns = [
    path('login/', views.LoginView.as_view(), name='auth-login'),
    path('register/', views.RegisterUserView.as_view(), name='auth-register'),
    path('me/', views.MeView.as_view(), name='auth-me'),
]
