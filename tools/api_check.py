import argparse, json, sys, urllib.error, urllib.request

def call(api, method, path, payload=None):
    data = json.dumps(payload).encode('utf-8') if payload is not None else None
    req = urllib.request.Request(api + path, data=data, method=method, headers={'Content-Type': 'application/json'})
    try:
        with urllib.request.urlopen(req, timeout=10) as resp:
            return resp.status, json.loads(resp.read().decode())
    except urllib.error.HTTPError as e:
        return e.code, json.loads(e.read().decode() or 'null')

def check(label, got, expected):
    ok = got == expected
    print(f"{'PASS' if ok else 'FAIL'} {label}: status {got} (expected {expected})")
    return ok

def main():
    p = argparse.ArgumentParser(description="Exercise a running device registry end to end")
    p.add_argument('--api', default='http://localhost:3000')
    args = p.parse_args()
    print(f"Checking {args.api} ...")
    results = []
    status, _ = call(args.api, 'GET', '/'); results.append(check("GET /", status, 200))
    status, body = call(args.api, 'GET', '/devices'); results.append(check("GET /devices", status, 200))
    print(f"  {body.get('count')} devices registered")
    status, body = call(args.api, 'POST', '/devices', {"name": "Kitchen Light", "type": "light"})
    results.append(check("POST /devices", status, 201))
    device_id = body["device"]["id"]
    status, _ = call(args.api, 'GET', f'/devices/{device_id}'); results.append(check("GET /devices/:id", status, 200))
    status, body = call(args.api, 'PUT', f'/devices/{device_id}', {"status": "on", "config": {"brightness": 80}})
    results.append(check("PUT /devices/:id", status, 200))
    status, _ = call(args.api, 'DELETE', f'/devices/{device_id}'); results.append(check("DELETE /devices/:id", status, 200))
    status, _ = call(args.api, 'GET', f'/devices/{device_id}'); results.append(check("GET deleted device", status, 404))
    status, _ = call(args.api, 'POST', '/devices', {"name": "Toaster", "type": "toaster"})
    results.append(check("POST invalid type", status, 400))
    status, _ = call(args.api, 'GET', '/devices/abc'); results.append(check("GET bad id", status, 400))
    status, _ = call(args.api, 'PUT', '/devices/1', {}); results.append(check("PUT empty body", status, 400))
    status, _ = call(args.api, 'GET', '/nowhere'); results.append(check("GET unknown route", status, 404))
    print(f"{sum(results)}/{len(results)} checks passed")
    sys.exit(0 if all(results) else 1)
if __name__ == "__main__": main()
