# recorder/core/__init__.py
