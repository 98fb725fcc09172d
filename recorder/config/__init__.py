# recorder/config/__init__.py
