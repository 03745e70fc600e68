from pathlib import Path

from filmstock.utilities.config import DATA_DIR as _DATA_DIR, IMAGE_DIR as _IMAGE_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_DATA_DIR).resolve()
INVENTORY_FILE = DATA_DIR / 'inventory.json'
IMAGE_DIR = Path(_IMAGE_DIR).resolve()
USER_IMAGES_DIR = IMAGE_DIR / 'user'
CATALOG_IMAGES_DIR = IMAGE_DIR / 'catalog'

__all__ = ['DATA_DIR', 'INVENTORY_FILE', 'IMAGE_DIR', 'USER_IMAGES_DIR', 'CATALOG_IMAGES_DIR']
