import os
import sys

# Ensure the src directory is on sys.path so tests can import hostel.* and hostel_handlers.*
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
	sys.path.insert(0, ROOT)

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("TABLE_NAME", "test-table")
