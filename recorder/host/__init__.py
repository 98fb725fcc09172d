# recorder/host/__init__.py
