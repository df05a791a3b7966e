import os
import pathlib
import sys
from urllib.parse import parse_qs, urlsplit

# Ensure project root is on PYTHONPATH
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Minimal env for the run (set before create_app so Config reads them)
os.environ.setdefault('ADMIN_API_KEY', 'test-key')
os.environ.setdefault('BASE_URL', 'http://localhost:8000')

from linkgate import create_app

app = create_app()
client = app.test_client()
visitor = {'X-Forwarded-For': '203.0.113.7'}

# 1) Unauthorized
r = client.post('/admin/create-link', json={'landingPage': 'welcome.html'})
print('unauthorized_status', r.status_code)

# 2) Invalid landing page
r = client.post('/admin/create-link', headers={'X-Admin-Key': 'test-key'}, json={'landingPage': 'nope.html'})
print('invalid_status', r.status_code, r.get_json())

# 3) Mint a link
r = client.post('/admin/create-link', headers={'X-Admin-Key': 'test-key'}, json={'landingPage': 'welcome.html'})
path_id = r.get_json()['path_id']
print('create_status', r.status_code, r.get_json()['url'])

# 4) No token -> redirect with a token
r = client.get(f'/{path_id}', headers=visitor)
token = parse_qs(urlsplit(r.headers['Location']).query)['token'][0]
print('issue_status', r.status_code)

# 5) Token -> landing page
r = client.get(f'/{path_id}?token={token}', headers=visitor)
print('serve_status', r.status_code, 'len', len(r.data))

# 6) Same token again -> rotated
r = client.get(f'/{path_id}?token={token}', headers=visitor)
print('replay_status', r.status_code, 'rotated', token not in r.headers['Location'])

print('status', client.get('/__status').get_json())
