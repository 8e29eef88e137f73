import pytest

@pytest.mark.asyncio
async def test_metrics_endpoint(client):
    await client.post("/api/applications")

    res = await client.get("/api/metrics")
    assert res.status_code == 200

    data = res.json()

    # Check structure
    assert data["status"] == "Online"
    assert "cpu" in data
    assert "ram" in data
    assert data["active_sessions"] == 1

    # Check data types
    assert isinstance(data["uptime"], int)
    assert isinstance(data["version"], str)


@pytest.mark.asyncio
async def test_root_health(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_form_steps_metadata(client):
    res = await client.get("/api/form/steps")
    assert res.status_code == 200

    data = res.json()
    assert [s["step"] for s in data["steps"]] == [0, 1, 2, 3, 4, 5, 6]
    assert data["rules"]["steps"]["0"]["acknowledgement"]["flag"] == "instructions_read"


@pytest.mark.asyncio
async def test_score_sheet_metadata(client):
    res = await client.get("/api/form/score-sheets")
    assert res.status_code == 200

    data = res.json()
    assert data["admin_total_cap"] == 25
    assert data["academic"][0]["key"] == "academic_masters"
    assert any(line["key"] == "res_papers" for line in data["research"])
