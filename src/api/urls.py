"""Main API URL router for /api/v1/."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from api.v1 import admin_views
from api.v1 import employee_views

router = DefaultRouter()
router.register(r'admin', admin_views.AdminViewSet, basename='admin')
router.register(r'employees', employee_views.EmployeeViewSet, basename='employee')


app_name = 'api'
urlpatterns = [
    # Before the router so "login" is never taken for an admin id.
    path('admin/login/', admin_views.AdminLoginView.as_view(), name='admin-login'),
    path('email-logs/', admin_views.EmailLogListView.as_view(), name='email-log-list'),
    path('', include(router.urls)),
]
