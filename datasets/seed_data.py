#!/usr/bin/env python3
"""
Seed Upcycle Hub listings via the marketplace API

This script:
1. Logs in as the seller (registering the account if it does not exist yet)
2. Reads listings from a CSV file, or uses the built-in sample listings
3. Normalizes categories, conditions and prices
4. Creates products via API
5. Attaches image URLs to each product in parallel

CSV columns: title, description, price, category, condition, location, images
(`price` in dollars, `images` separated by `|`).

Usage:
    python seed_data.py \
        --api-url http://localhost:8000 \
        --email seller1@upcyclehub.com \
        --password secret123 \
        --csv datasets/listings.csv \
        --count 50
"""

import csv
import random
import argparse
import requests
import time
import re
import logging
from typing import Dict, List, Optional, Any
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor, as_completed

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


CATEGORIES = ['Clothing', 'Electronics', 'Furniture', 'Home Goods', 'Photography', 'Vintage', 'Other']
CONDITIONS = ['New', 'Like New', 'Excellent', 'Good', 'Fair', 'Poor']

# Free-text keywords to marketplace category
CATEGORY_KEYWORDS = {
    'Clothing': ['clothing', 'shirt', 'jacket', 'dress', 'denim', 'shoe', 'fashion', 'apparel'],
    'Electronics': ['electronic', 'headphone', 'speaker', 'radio', 'phone', 'computer', 'audio'],
    'Furniture': ['furniture', 'chair', 'table', 'desk', 'shelf', 'dresser', 'stool', 'bench'],
    'Home Goods': ['home', 'kitchen', 'lamp', 'decor', 'vase', 'planter', 'rug', 'garden'],
    'Photography': ['photo', 'camera', 'lens', 'film', 'tripod'],
    'Vintage': ['vintage', 'antique', 'retro', 'classic'],
}

SAMPLE_LISTINGS = [
    {
        'title': 'Vintage Camera',
        'description': 'A beautiful vintage camera in excellent condition',
        'price': '125.00',
        'category': 'Photography',
        'condition': 'Excellent',
        'location': 'Portland, OR',
        'images': 'https://images.unsplash.com/photo-1516035069371-29a1b244cc32',
    },
    {
        'title': 'Upcycled Wooden Chair',
        'description': 'Handcrafted chair made from reclaimed wood',
        'price': '89.00',
        'category': 'Furniture',
        'condition': 'Like New',
        'location': 'Seattle, WA',
        'images': 'https://images.unsplash.com/photo-1503602642458-232111445657',
    },
    {
        'title': 'Patchwork Denim Jacket',
        'description': 'Reworked denim jacket stitched from three donor jackets',
        'price': '64.50',
        'category': 'Clothing',
        'condition': 'Good',
        'location': 'Austin, TX',
        'images': '',
    },
    {
        'title': 'Refurbished Headphones',
        'description': 'Over-ear headphones with new pads and cable',
        'price': '45.00',
        'category': 'Electronics',
        'condition': 'Good',
        'location': 'Denver, CO',
        'images': '',
    },
    {
        'title': 'Wine Bottle Pendant Lamp',
        'description': 'Pendant lamp made from a cut and polished wine bottle',
        'price': '38.00',
        'category': 'Home Goods',
        'condition': 'New',
        'location': 'Oakland, CA',
        'images': '',
    },
]


class ListingMapper:
    """Maps CSV rows to the product creation payload"""

    def map_row(self, row: Dict[str, str], product_num: int) -> Dict[str, Any]:
        def get_value(column: str, default: str = '') -> str:
            # Case-insensitive column lookup
            for key, value in row.items():
                if key and key.strip().lower() == column:
                    return value.strip() if value else default
            return default

        title = get_value('title') or f"Upcycled Item {product_num}"
        if len(title) > 200:
            title = title[:197] + "..."

        description = get_value('description') or None

        return {
            'title': title,
            'description': description,
            'price_cents': self.parse_price(get_value('price')),
            'category': self.map_category(get_value('category'), title, description),
            'condition': self.map_condition(get_value('condition')),
            'location': get_value('location') or None,
            'status': 'active',
            'image_urls': [url.strip() for url in get_value('images').split('|') if url.strip()],
        }

    def map_category(self, category: str, title: str = '', description: Optional[str] = None) -> str:
        for known in CATEGORIES:
            if category.lower() == known.lower():
                return known

        text = f"{category} {title} {description or ''}".lower()
        for known, keywords in CATEGORY_KEYWORDS.items():
            if any(keyword in text for keyword in keywords):
                return known
        return 'Other'

    def map_condition(self, condition: str) -> str:
        for known in CONDITIONS:
            if condition.lower() == known.lower():
                return known
        return 'Good'

    def parse_price(self, price_str: str) -> int:
        """Parse a dollar price string to cents; falls back to a random price"""
        cleaned = re.sub(r'[^\d.]', '', price_str or '')
        try:
            cents = int(round(float(cleaned) * 100))
        except ValueError:
            cents = 0
        if cents <= 0:
            cents = random.randint(5, 250) * 100
        return cents


class MarketplaceAPIClient:
    """Client for the Upcycle Hub API"""

    def __init__(self, base_url: str, auth_token: Optional[str] = None):
        self.base_url = base_url.rstrip('/')
        self.headers = {'Content-Type': 'application/json'}
        if auth_token:
            self.set_token(auth_token)

    def set_token(self, auth_token: str) -> None:
        self.headers['Authorization'] = f'Bearer {auth_token}'

    def login(self, email: str, password: str) -> Optional[str]:
        response = requests.post(
            f'{self.base_url}/api/auth/login',
            headers=self.headers,
            json={'email': email, 'password': password},
            timeout=10
        )
        if response.status_code == 401:
            return None
        response.raise_for_status()
        return response.json().get('access_token')

    def register(self, email: str, password: str, username: Optional[str] = None) -> Optional[str]:
        payload = {'email': email, 'password': password, 'is_seller': True}
        if username:
            payload['username'] = username
        response = requests.post(
            f'{self.base_url}/api/auth/register',
            headers=self.headers,
            json=payload,
            timeout=10
        )
        if response.status_code == 429:
            logger.error(f"✗ Registration rate limited, retry after {response.headers.get('Retry-After', '?')}s")
        response.raise_for_status()
        return response.json().get('access_token')

    def authenticate(self, email: str, password: str) -> str:
        """Log in, registering the seller first when the account does not exist"""
        token = self.login(email, password)
        if token is None:
            logger.info(f"  Login failed for {email}, registering a new seller account...")
            token = self.register(email, password)
            if token is None:
                raise RuntimeError(f"Account {email} requires email confirmation before seeding")
        self.set_token(token)
        return token

    def create_product(self, product_data: Dict[str, Any]) -> Optional[str]:
        """Create a product and return product ID"""
        start_time = time.time()
        try:
            response = requests.post(
                f'{self.base_url}/api/products',
                headers=self.headers,
                json=product_data,
                timeout=10
            )
            response.raise_for_status()
            elapsed = time.time() - start_time

            product_id = response.json().get('product', {}).get('id')
            if product_id:
                logger.info(f"  ✓ Product created: ID={product_id[:8]}... ({elapsed:.2f}s)")
                return product_id
            logger.warning(f"  ⚠ Product created but no ID returned ({elapsed:.2f}s)")
            return None
        except requests.exceptions.HTTPError as e:
            elapsed = time.time() - start_time
            logger.error(f"  ✗ HTTP {e.response.status_code} creating product ({elapsed:.2f}s)")
            logger.error(f"    Response content: {e.response.text}")
            return None
        except requests.exceptions.RequestException as e:
            elapsed = time.time() - start_time
            logger.error(f"  ✗ Error creating product: {str(e)[:200]} ({elapsed:.2f}s)")
            return None

    def add_image(self, product_id: str, image_url: str, is_main: bool, image_num: int = 0, total_images: int = 0) -> bool:
        """Attach an image URL to a product"""
        if not image_url.startswith(('http://', 'https://')):
            return False

        start_time = time.time()
        try:
            response = requests.post(
                f'{self.base_url}/api/products/{product_id}/images',
                headers=self.headers,
                json={'url': image_url, 'is_main': is_main},
                timeout=30
            )
            response.raise_for_status()
            elapsed = time.time() - start_time
            logger.info(f"    ↳ Image {image_num}/{total_images}: Attached ({elapsed:.2f}s)")
            return True
        except requests.exceptions.HTTPError as e:
            logger.warning(f"    ↳ Image {image_num}/{total_images}: HTTP {e.response.status_code} attaching {image_url[:50]}...")
            logger.warning(f"      Response content: {e.response.text}")
            return False
        except requests.exceptions.RequestException as e:
            logger.warning(f"    ↳ Image {image_num}/{total_images}: Failed to attach {image_url[:50]}...: {e}")
            return False


def load_csv(file_path: str) -> List[Dict[str, str]]:
    """Load CSV file and return list of rows"""
    logger.info(f"Reading CSV file: {file_path}")
    start_time = time.time()
    rows = []
    with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
        reader = csv.DictReader(f)
        for row in reader:
            rows.append({k: (v.strip() if v else '') for k, v in row.items() if k})

    elapsed = time.time() - start_time
    logger.info(f"✓ Loaded {len(rows):,} rows from CSV in {elapsed:.2f}s")
    return rows


def main():
    parser = argparse.ArgumentParser(
        description='Seed Upcycle Hub listings via the marketplace API',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
    python seed_data.py \\
        --api-url http://localhost:8000 \\
        --email seller1@upcyclehub.com \\
        --password secret123 \\
        --count 50
        """
    )
    parser.add_argument('--api-url', default='http://localhost:8000', help='Marketplace API URL')
    parser.add_argument('--csv', help='Path to a listings CSV file (defaults to built-in samples)')
    parser.add_argument('--token', help='Seller access token (skips login)')
    parser.add_argument('--email', help='Seller email')
    parser.add_argument('--password', help='Seller password')
    parser.add_argument('--count', type=int, default=50, help='Number of listings to create')
    parser.add_argument('--delay', type=float, default=0.2, help='Delay between API calls (seconds)')
    parser.add_argument('--skip-images', action='store_true', help='Skip image uploads')
    parser.add_argument('--max-images', type=int, default=3, help='Maximum images per product')
    parser.add_argument('--max-parallel-images', type=int, default=5, help='Maximum parallel image uploads (default: 5)')

    args = parser.parse_args()
    if not args.token and not (args.email and args.password):
        parser.error('either --token or both --email and --password are required')

    script_start_time = time.time()
    logger.info("=" * 70)
    logger.info("UPCYCLE HUB LISTING SEEDING SCRIPT")
    logger.info("=" * 70)
    logger.info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"  API URL: {args.api_url}")
    logger.info(f"  Source: {args.csv or 'built-in samples'}")
    logger.info(f"  Target count: {args.count}")
    logger.info("=" * 70)

    logger.info("\n[STEP 1/3] Authenticating...")
    client = MarketplaceAPIClient(args.api_url, args.token)
    if not args.token:
        client.authenticate(args.email, args.password)
    logger.info("✓ Authenticated")

    logger.info("\n[STEP 2/3] Loading listings...")
    rows = load_csv(args.csv) if args.csv else list(SAMPLE_LISTINGS)
    if not rows:
        logger.error("✗ No listings to seed")
        return
    # Cycle through the source when asked for more listings than it holds
    sampled_rows = [rows[i % len(rows)] for i in range(args.count)]
    mapper = ListingMapper()

    logger.info("\n[STEP 3/3] Creating listings...")
    success_count = 0
    error_count = 0
    images_attached = 0
    images_failed = 0
    process_start_time = time.time()

    for i, row in enumerate(sampled_rows, 1):
        try:
            product_data = mapper.map_row(row, i)
            image_urls = product_data.pop('image_urls')[:args.max_images]
            logger.info(f"\n[{i}/{len(sampled_rows)}] {product_data['title'][:60]} "
                        f"({product_data['category']}, ${product_data['price_cents'] / 100:.2f})")

            product_id = client.create_product(product_data)
            if not product_id:
                error_count += 1
                continue
            success_count += 1

            if image_urls and not args.skip_images:
                with ThreadPoolExecutor(max_workers=min(args.max_parallel_images, len(image_urls))) as executor:
                    futures = [
                        executor.submit(client.add_image, product_id, url, idx == 0, idx + 1, len(image_urls))
                        for idx, url in enumerate(image_urls)
                    ]
                    for future in as_completed(futures):
                        if future.result():
                            images_attached += 1
                        else:
                            images_failed += 1

            time.sleep(args.delay)
        except KeyboardInterrupt:
            logger.warning(f"\n\n⚠ Interrupted by user at listing {i}/{len(sampled_rows)}")
            break
        except requests.exceptions.RequestException as e:
            error_count += 1
            logger.error(f"  ✗ Error processing row: {e}", exc_info=True)

    total_time = time.time() - script_start_time
    process_time = time.time() - process_start_time

    logger.info(f"\n\n{'=' * 70}")
    logger.info("SEEDING SUMMARY")
    logger.info(f"{'=' * 70}")
    logger.info(f"Total time: {total_time:.1f}s")
    logger.info(f"Listings: ✓ {success_count:,} created, ✗ {error_count:,} failed")
    if not args.skip_images:
        logger.info(f"Images: ✓ {images_attached:,} attached, ✗ {images_failed:,} failed")
    logger.info(f"Average time per listing: {process_time / max(len(sampled_rows), 1):.2f}s")
    logger.info(f"{'=' * 70}\n")


if __name__ == '__main__':
    main()
