# recorder/app/__init__.py
