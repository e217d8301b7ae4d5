from django.urls import path, include

urlpatterns = [
    path('api/git/', include('server_app.urls', namespace='server_app')),
]
