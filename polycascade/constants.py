# Constants
ID_FIELD = '_id'
DEFAULT_NAMESPACE = 'public'
DEFAULT_TRANSPORT = 'plain'
DEFAULT_USER = 'pa'
DEFAULT_PASS = ''
DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 20590
MAX_NEST_DEPTH = None

# Update operators
SET = '$set'
UNSET = '$unset'
PULL = '$pull'
PUSH = '$push'

# Filter operators
IN = '$in'
NE = '$ne'
EXISTS = '$exists'

# Derived Variables
DEFAULT_ADDRESS = (DEFAULT_HOST, DEFAULT_PORT)
