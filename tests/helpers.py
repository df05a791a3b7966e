from urllib.parse import parse_qs, urlsplit

ADMIN_KEY = 'test-admin-key'


def visitor(ip='203.0.113.7'):
    return {'X-Forwarded-For': ip}


def token_from(resp):
    return parse_qs(urlsplit(resp.headers['Location']).query)['token'][0]


def mint(client, landing_page='welcome.html'):
    r = client.post('/admin/create-link', headers={'X-Admin-Key': ADMIN_KEY},
                    json={'landingPage': landing_page})
    assert r.status_code == 201, r.get_data(as_text=True)
    return r.get_json()['path_id']
