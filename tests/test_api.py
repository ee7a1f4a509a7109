from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def test_sip_swp_defaults_integrated():
    res = client.get("/sip-swp")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["mode"] == "integrated"
    assert len(body["rows"]) == 29
    assert body["rows"][0]["begin_balance"] == 0
    assert body["summary"]["withdrawal_start"] == 10
    assert len(body["chart"]["year"]) == 29


def test_sip_swp_separate_mode():
    res = client.get("/sip-swp", params={"mode": "separate", "extension_years": 10,
                                         "cap_policy": "cap_to_available_balance"})
    assert res.status_code == 200
    rows = res.json()["rows"]
    assert len(rows) == 19
    assert "sip_adjusted_total" in rows[0]
    assert rows[0]["swp_begin"] is None


def test_sip_swp_auto_start():
    res = client.get("/sip-swp", params={"years": 5, "auto_start": True, "swp_years": 20})
    assert res.status_code == 200
    summary = res.json()["summary"]
    assert summary["withdrawal_start"] == 6
    assert summary["simulation_years"] == 25


def test_sip_swp_rejects_out_of_range_query():
    res = client.get("/sip-swp", params={"years": 0})
    assert res.status_code == 422


def test_form_falls_back_to_defaults():
    res = client.post("/sip-swp/form", data={"sip": "abc", "preset": "capped"})
    assert res.status_code == 200
    body = res.json()
    assert body["params"]["monthly_contribution"] == 1000.0
    assert body["summary"]["withdrawal_start"] == 11
    assert body["summary"]["simulation_years"] == 30
    assert all(row["end_balance"] >= 0 for row in body["rows"])


def test_form_configuration_error_is_400():
    res = client.post("/sip-swp/form", data={"years": "0"})
    assert res.status_code == 400
    assert "contribution_years" in res.json()["detail"]


def test_form_unknown_preset():
    res = client.post("/sip-swp/form", data={"preset": "bogus"})
    assert res.status_code == 400


def test_defaults_endpoint():
    body = client.get("/sip-swp/defaults").json()
    assert body["defaults"]["swp_years"] == 20
    assert set(body["presets"]) == {"integrated", "separate", "capped"}


def test_sip_only_endpoint():
    res = client.get("/sip", params={"years": 1, "annual_interest_rate": 12, "monthly_investment": 1000})
    assert res.status_code == 200
    rows = res.json()["rows"]
    assert len(rows) == 1
    assert rows[0]["end_balance"] == 12809
    assert rows[0]["monthly_withdrawal"] is None
