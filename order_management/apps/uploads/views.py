import logging
import os
import secrets
import time

from django.conf import settings
from django.core.files.storage import default_storage
from django.http import FileResponse
from django.urls import reverse
from rest_framework import status
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)

UPLOAD_DIR = 'uploads'


class ImageUploadView(APIView):
    parser_classes = [MultiPartParser]

    def post(self, request):
        image = request.FILES.get('image')
        if image is None:
            logger.error("UPLOAD — no image provided")
            return Response({'error': 'No image provided'}, status=status.HTTP_400_BAD_REQUEST)

        logger.info("UPLOAD   — content type: %s | size: %d bytes", image.content_type, image.size)

        if not (image.content_type or '').startswith('image/'):
            return Response({'error': 'File must be an image'}, status=status.HTTP_400_BAD_REQUEST)

        if image.size > settings.UPLOAD_MAX_BYTES:
            limit_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
            return Response({'error': 'Image must be smaller than {}MB'.format(limit_mb)}, status=status.HTTP_400_BAD_REQUEST)

        _, ext = os.path.splitext(image.name)
        filename = '{}_{}{}'.format(int(time.time()), secrets.token_hex(8), ext.lower())

        try:
            saved = default_storage.save('{}/{}'.format(UPLOAD_DIR, filename), image)
        except OSError as e:
            logger.exception("Image upload error: %s", str(e))
            return Response({'error': 'Failed to upload image: {}'.format(e)},
                            status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        name = os.path.basename(saved)
        url = request.build_absolute_uri(reverse('upload-detail', args=[name]))
        logger.info("UPLOAD   — stored %s", url)
        return Response({'url': url})


class UploadedImageView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, filename):
        path = '{}/{}'.format(UPLOAD_DIR, os.path.basename(filename))
        if not default_storage.exists(path):
            return Response({'error': 'File not found'}, status=status.HTTP_404_NOT_FOUND)
        return FileResponse(default_storage.open(path, 'rb'))
