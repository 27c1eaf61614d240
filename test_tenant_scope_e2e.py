# test_tenant_scope_e2e.py

def jprint(step, r):
    assert 200 <= r.status_code < 300, f"{step} -> {r.status_code}: {r.text}"
    return r.json()

def _create_tenant(client, base_url, auth_headers, name, join_date):
    r = client.post(f"{base_url}/super-admin/tenants", headers=auth_headers, json={
        "business_name": name, "owner_name": "Owner", "owner_email": f"{name}@example.com",
        "monthly_fee": 300, "join_date": join_date,
    })
    assert r.status_code == 201, r.text
    return r.json()

def _login(client, base_url, email, password):
    r = client.post(f"{base_url}/auth/login", params={"email": email, "password": password})
    return {"Authorization": f"Bearer {jprint('POST /auth/login', r)['access_token']}"}

def test_tenant_sees_only_its_own_billing(client, base_url, auth_headers, rng_suffix):
    a = _create_tenant(client, base_url, auth_headers, f"alpha-{rng_suffix}", "2024-02-15")
    b = _create_tenant(client, base_url, auth_headers, f"beta-{rng_suffix}", "2024-02-01")
    a_id, b_id = a["tenant"]["id"], b["tenant"]["id"]

    # leap February: 300/29*15
    assert a["first_payment"]["amount"] == 155.17
    assert b["first_payment"]["amount"] == 300.0

    r = client.post(f"{base_url}/super-admin/system-users", headers=auth_headers, json={
        "email": f"manager-{rng_suffix}@alpha.test", "first_name": "Mona", "password": "s3cret!",
        "role": "tenant-admin", "tenant_id": a_id,
    })
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "TENANT_ADMIN"

    hdrs = _login(client, base_url, f"manager-{rng_suffix}@alpha.test", "s3cret!")
    mine = jprint("GET /tenant/billing", client.get(f"{base_url}/tenant/billing", headers=hdrs))
    assert mine["tenant_id"] == a_id
    assert mine["next_payment_date"] == "2024-03-01"
    assert [p["id"] for p in mine["payments"]] == [a["first_payment"]["id"]]
    assert all(p["tenant_id"] != b_id for p in mine["payments"])

    # tenant users cannot reach the console
    r = client.get(f"{base_url}/super-admin/tenants", headers=hdrs)
    assert r.status_code == 403
    r = client.get(f"{base_url}/super-admin/financials/payments", headers=hdrs, params={"tenant_id": b_id})
    assert r.status_code == 403

def test_super_admin_has_no_tenant_scope(client, base_url, auth_headers):
    r = client.get(f"{base_url}/tenant/billing", headers=auth_headers)
    assert r.status_code == 403

def test_system_user_rules(client, base_url, auth_headers, rng_suffix):
    email = f"ops-{rng_suffix}@platform.test"
    r = client.post(f"{base_url}/super-admin/system-users", headers=auth_headers, json={
        "email": email, "first_name": "Ops", "password": "pw-123456", "role": "Super Admin",
    })
    assert r.status_code == 201, r.text
    assert r.json()["tenant_id"] is None

    r = client.post(f"{base_url}/super-admin/system-users", headers=auth_headers, json={
        "email": email.upper(), "first_name": "Ops", "password": "pw", "role": "SUPER_ADMIN",
    })
    assert r.status_code == 409

    r = client.post(f"{base_url}/super-admin/system-users", headers=auth_headers, json={
        "email": f"staff-{rng_suffix}@x.test", "first_name": "S", "password": "pw", "role": "tenant_staff",
    })
    assert r.status_code == 400

    r = client.post(f"{base_url}/super-admin/system-users", headers=auth_headers, json={
        "email": f"staff-{rng_suffix}@x.test", "first_name": "S", "password": "pw", "role": "janitor",
    })
    assert r.status_code == 400

    users = jprint("GET /super-admin/system-users", client.get(
        f"{base_url}/super-admin/system-users", headers=auth_headers, params={"role": "super-admin"}))
    assert email in {u["email"] for u in users}
    assert all(u["role"] == "SUPER_ADMIN" for u in users)

def test_login_rejects_wrong_password(client, base_url, auth_headers):
    r = client.post(f"{base_url}/auth/login", params={"email": "admin@example.com", "password": "wrong"})
    assert r.status_code == 401
