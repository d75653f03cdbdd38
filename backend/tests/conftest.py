import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("AUTH_SECRET", "test-secret")
