import os
import sys

# Ensure the src directory is on sys.path so tests can import luxestay.*
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
TESTS = os.path.abspath(os.path.dirname(__file__))
if TESTS not in sys.path:
    sys.path.insert(0, TESTS)

# handler modules wire boto3 at import time
os.environ.setdefault("TABLE_NAME", "test-table")
os.environ.setdefault("JWT_SECRET", "testsecret-that-is-long-enough-for-hs256")
os.environ.setdefault("AWS_DEFAULT_REGION", "ap-south-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
