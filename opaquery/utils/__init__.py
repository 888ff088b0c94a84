# opaquery/utils/__init__.py
