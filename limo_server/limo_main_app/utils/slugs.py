"""Vehicle type slug helpers"""
import re


def vehicle_slug(name):
    """
    Convert a vehicle display name to its pricing rule key.

    "Business Sedan" -> "business_sedan", "First-Class SUV" -> "first_class_suv"
    """
    slug = (name or '').lower()
    slug = slug.replace('-', '_')
    slug = re.sub(r'\s+', '_', slug)
    return re.sub(r'[^a-z0-9_]', '', slug)
