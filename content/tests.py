"""
Tests for banner and page endpoints.
"""
from rest_framework.test import APITestCase

from accounts.models import User
from content.models import Banner, PageContent


class PublicContentAPITestCase(APITestCase):

    def setUp(self):
        Banner.objects.create(image_url='/b/2.jpg', position='home_top', device='desktop', locale='pl', sort_order=2)
        Banner.objects.create(image_url='/b/1.jpg', position='home_top', device='desktop', locale='pl', sort_order=1)
        Banner.objects.create(image_url='/b/m.jpg', position='home_top', device='mobile', locale='pl')
        Banner.objects.create(image_url='/b/off.jpg', position='home_top', device='desktop', locale='pl', is_active=False)
        Banner.objects.create(image_url='/b/en.jpg', position='promo', device='desktop', locale='en')

    def test_banners_filtered_and_ordered(self):
        """
        Given: Active and inactive banners in several placements
        When: Requesting home_top desktop banners for pl
        Then: Only the active matches come back in sort order
        """
        response = self.client.get(
            '/api/public/banners/',
            {'position': 'home_top', 'device': 'desktop', 'locale': 'pl'},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual([b['image_url'] for b in response.data], ['/b/1.jpg', '/b/2.jpg'])

    def test_banners_without_filters_returns_all_active(self):
        response = self.client.get('/api/public/banners/')
        self.assertEqual(len(response.data), 4)

    def test_published_page(self):
        PageContent.objects.create(
            slug='about', locale='pl', title='O nas',
            content={'blocks': [{'type': 'paragraph', 'data': {'text': 'Hej'}}]},
        )

        response = self.client.get('/api/public/pages/pl/about/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['title'], 'O nas')
        self.assertEqual(response.data['content']['blocks'][0]['type'], 'paragraph')

    def test_unpublished_page_not_found(self):
        PageContent.objects.create(slug='draft', locale='pl', title='Draft', is_published=False)

        response = self.client.get('/api/public/pages/pl/draft/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'Not Found')

    def test_invalid_locale(self):
        response = self.client.get('/api/public/pages/fr/about/')
        self.assertEqual(response.status_code, 400)


class AdminContentAPITestCase(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user('admin', password='pass', role=User.Role.ADMIN)
        self.customer = User.objects.create_user('customer', password='pass')

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.customer)
        response = self.client.get('/api/admin/banners/')
        self.assertEqual(response.status_code, 403)

    def test_admin_creates_banner(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post('/api/admin/banners/', {
            'image_url': '/b/new.jpg', 'position': 'promo', 'device': 'mobile', 'locale': 'UA',
        })

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Banner.objects.get().locale, 'ua')

    def test_banner_rejects_unknown_position(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post('/api/admin/banners/', {
            'image_url': '/b/new.jpg', 'position': 'footer', 'locale': 'pl',
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('position', response.data['detail'])

    def test_admin_creates_page_and_rejects_duplicate(self):
        self.client.force_authenticate(self.admin)
        payload = {'slug': 'terms', 'locale': 'en', 'title': 'Terms', 'content': {'blocks': []}}

        first = self.client.post('/api/admin/pages/', payload, format='json')
        second = self.client.post('/api/admin/pages/', payload, format='json')

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 400)
        self.assertEqual(PageContent.objects.count(), 1)

    def test_page_content_must_be_object(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            '/api/admin/pages/',
            {'slug': 'bad', 'locale': 'en', 'title': 'Bad', 'content': ['not', 'an', 'object']},
            format='json',
        )

        self.assertEqual(response.status_code, 400)
