from django.urls import path
from django.contrib.auth import views as auth_views
from . import views

urlpatterns = [
    # Customer dashboard
    path('', views.dashboard, name='dashboard'),

    # Auth
    path("login/", auth_views.LoginView.as_view(template_name="registration/login.html"), name="login"),
    path("logout/", auth_views.LogoutView.as_view(), name="logout"),
    path("signup/", views.signup, name="signup"),

    # Orders
    path('orders/create/', views.create_order, name='create_order'),

    # Admin
    path('manage/', views.admin_dashboard, name='admin_dashboard'),
    path('manage/orders/<str:order_id>/advance/', views.advance_order, name='advance_order'),
    path('manage/expenses/add/', views.add_expense, name='add_expense'),

    # Change feed polling
    path("changes/", views.changes, name="changes"),
]
