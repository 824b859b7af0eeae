import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

pytestmark = pytest.mark.django_db

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    return tmp_path


def upload(client, content=PNG_BYTES, name='speaker.PNG', content_type='image/png'):
    image = SimpleUploadedFile(name, content, content_type=content_type)
    return client.post(reverse('upload-create'), {'image': image}, format='multipart')


def test_upload_stores_image_and_serves_it(staff_client, anon_client, media_root):
    response = upload(staff_client)

    assert response.status_code == 200
    url = response.json()['url']
    assert url.startswith('http://testserver/api/uploads/')
    assert url.endswith('.png')
    assert len(list((media_root / 'uploads').iterdir())) == 1

    fetched = anon_client.get(url)
    assert fetched.status_code == 200
    assert b''.join(fetched.streaming_content) == PNG_BYTES


def test_upload_requires_login(anon_client):
    assert upload(anon_client).status_code == 401


def test_missing_image(staff_client):
    response = staff_client.post(reverse('upload-create'), {}, format='multipart')
    assert response.status_code == 400
    assert response.json() == {'error': 'No image provided'}


def test_non_image_is_rejected(staff_client, media_root):
    response = upload(staff_client, content=b'%PDF-1.7', name='invoice.pdf', content_type='application/pdf')
    assert response.status_code == 400
    assert response.json() == {'error': 'File must be an image'}
    assert not (media_root / 'uploads').exists()


def test_oversized_image_is_rejected(staff_client, settings, media_root):
    settings.UPLOAD_MAX_BYTES = 1024 * 1024
    response = upload(staff_client, content=b'\x00' * (1024 * 1024 + 1))
    assert response.status_code == 400
    assert response.json() == {'error': 'Image must be smaller than 1MB'}
    assert not (media_root / 'uploads').exists()


def test_unknown_file_is_not_found(anon_client):
    response = anon_client.get(reverse('upload-detail', args=['nothing-here.png']))
    assert response.status_code == 404
    assert response.json() == {'error': 'File not found'}
