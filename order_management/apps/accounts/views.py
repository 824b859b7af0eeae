import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import User
from .permissions import IsManager
from .serializers import LoginSerializer, RegisterUserSerializer, UserSerializer
from .tokens import issue_token

logger = logging.getLogger(__name__)


class LoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email']

        user = User.objects.filter(email__iexact=email, is_active=True).first()
        if user is None or not user.check_password(serializer.validated_data['password']):
            logger.info("LOGIN FAILED — %s", email)
            return Response({'error': 'Invalid email or password'}, status=status.HTTP_401_UNAUTHORIZED)

        logger.info("LOGIN — user: %s | role: %s", user.username, user.role)
        return Response({'token': issue_token(user), 'user': UserSerializer(user).data})


class RegisterUserView(APIView):
    permission_classes = [IsManager]

    def post(self, request):
        serializer = RegisterUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("USER REGISTERED — %s (%s) by %s", user.username, user.role, request.user.username)
        return Response({'user': UserSerializer(user).data}, status=status.HTTP_201_CREATED)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)
