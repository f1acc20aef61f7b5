"""NAVTEX 송신소 API 테스트.

NAVTEX transmitter API tests — Lookup by area subtree and the NAVTEX
selection computed from message areas.
"""

from httpx import AsyncClient

from tests.conftest import AREA

URL = "/api/v1/admin/transmitters"


class TestTransmitterRead:
    """송신소 조회 테스트."""

    async def test_list(self, client: AsyncClient, transmitters):
        res = await client.get(URL)
        assert res.status_code == 200
        assert [t["name"] for t in res.json()] == ["Retired", "Skagen", "South"]

    async def test_get_by_name(self, client: AsyncClient, transmitters):
        res = await client.get(f"{URL}/Skagen")
        assert res.status_code == 200
        assert res.json()["areas"] == [f"{AREA}:north:skagen"]

    async def test_get_nonexistent(self, client: AsyncClient):
        res = await client.get(f"{URL}/Nowhere")
        assert res.status_code == 404


class TestTransmittersByArea:
    """영역 하위 트리 기반 송신소 조회 테스트."""

    async def test_subtree_match(self, client: AsyncClient, transmitters):
        """north 하위 영역을 담당하는 활성 송신소만."""
        res = await client.get(f"{URL}/by-area", params={"area": f"{AREA}:north"})
        assert [t["name"] for t in res.json()] == ["Skagen"]

    async def test_include_inactive(self, client: AsyncClient, transmitters):
        res = await client.get(f"{URL}/by-area", params={"area": f"{AREA}:north", "only_active": "false"})
        assert [t["name"] for t in res.json()] == ["Retired", "Skagen"]

    async def test_root_matches_everything_below(self, client: AsyncClient, transmitters):
        res = await client.get(f"{URL}/by-area", params={"area": AREA})
        assert [t["name"] for t in res.json()] == ["Skagen", "South"]

    async def test_leaf_does_not_match_ancestor(self, client: AsyncClient, transmitters):
        """하위 영역으로 조회하면 상위 영역 담당 송신소는 제외."""
        res = await client.get(f"{URL}/by-area", params={"area": f"{AREA}:north:skagen", "only_active": "false"})
        assert [t["name"] for t in res.json()] == ["Skagen"]

    async def test_multiple_areas(self, client: AsyncClient, transmitters):
        res = await client.get(f"{URL}/by-area", params=[("area", f"{AREA}:north"), ("area", f"{AREA}:south")])
        assert [t["name"] for t in res.json()] == ["Skagen", "South"]

    async def test_no_area_is_unrestricted(self, client: AsyncClient, transmitters):
        res = await client.get(f"{URL}/by-area")
        assert [t["name"] for t in res.json()] == ["Skagen", "South"]

    async def test_unknown_area(self, client: AsyncClient, transmitters):
        res = await client.get(f"{URL}/by-area", params={"area": "urn:missing"})
        assert res.status_code == 404

    async def test_follows_area_move(self, client: AsyncClient, areas, transmitters):
        """영역 이동 후 lineage 기반 조회에 반영."""
        south, north = areas[f"{AREA}:south"], areas[f"{AREA}:north"]
        await client.put(f"/api/v1/admin/areas/{south.id}/parent", json={"parent_id": str(north.id)})

        res = await client.get(f"{URL}/by-area", params={"area": f"{AREA}:north"})
        assert [t["name"] for t in res.json()] == ["Skagen", "South"]


class TestNavtexSelection:
    """NAVTEX 송신소 선택 테스트."""

    async def test_selection(self, client: AsyncClient, transmitters):
        """활성 송신소 전체를 나열하고 메시지 영역에 속한 것만 선택."""
        res = await client.post(f"{URL}/navtex-selection", json={"area_mrns": [f"{AREA}:north"]})
        assert res.status_code == 200
        assert res.json() == [
            {"name": "Skagen", "selected": True},
            {"name": "South", "selected": False},
        ]

    async def test_selection_without_areas(self, client: AsyncClient, transmitters):
        """메시지 영역이 없으면 아무것도 선택하지 않음."""
        res = await client.post(f"{URL}/navtex-selection", json={"area_mrns": []})
        assert all(t["selected"] is False for t in res.json())
        assert len(res.json()) == 2

    async def test_selection_unknown_area(self, client: AsyncClient, transmitters):
        res = await client.post(f"{URL}/navtex-selection", json={"area_mrns": ["urn:missing"]})
        assert res.status_code == 404
