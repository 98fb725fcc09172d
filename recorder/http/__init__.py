# recorder/http/__init__.py
