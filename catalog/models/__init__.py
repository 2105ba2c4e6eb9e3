from catalog.models.category_model import Category
from catalog.models.product_model import Product

__all__ = [
    "Category",
    "Product",
]
