"""
Commerce Spine - data access and schema lifecycle for an e-commerce backend.

- commerce_spine.core: stores, repositories, facade, lifecycle
- commerce_spine.api: operator HTTP routes (health, schema lifecycle)
"""

__version__ = "0.1.0"
