"""영역/카테고리 트리 API 테스트.

Area and category tree API tests — Create, read, move, (de)activate, delete
and lineage rebuild. Verifies that lineage and activation stay consistent
after every edit.
"""

import uuid

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import AREA

URL = "/api/v1/admin/areas"


def desc(name: str, lang: str = "en") -> dict:
    return {"lang": lang, "name": name}


class TestAreaCreate:
    """영역 생성 테스트."""

    async def test_create_root(self, client: AsyncClient):
        """루트 영역 생성 — lineage는 /id/."""
        res = await client.post(URL, json={"mrn": "urn:mrn:test:dk", "descs": [desc("Denmark")]})
        assert res.status_code == 201
        data = res.json()
        assert data["parent_id"] is None
        assert data["active"] is True
        assert data["lineage"] == f"/{data['id']}/"
        assert data["descs"] == [desc("Denmark")]

    async def test_create_child(self, client: AsyncClient, areas):
        """자식 영역 lineage는 부모 lineage + 자기 id."""
        parent = areas[f"{AREA}:south"]
        res = await client.post(URL, json={"mrn": f"{AREA}:south:bornholm", "parent_id": str(parent.id)})
        assert res.status_code == 201
        data = res.json()
        assert data["lineage"] == f"{parent.lineage}{data['id']}/"

    async def test_create_under_inactive_parent(self, client: AsyncClient):
        """비활성 부모 아래 생성 시 기본 비활성."""
        root = (await client.post(URL, json={"mrn": "urn:mrn:test:x", "active": False})).json()
        res = await client.post(URL, json={"mrn": "urn:mrn:test:x:y", "parent_id": root["id"]})
        assert res.json()["active"] is False

    async def test_create_active_under_inactive_parent(self, client: AsyncClient):
        """명시적 활성 생성 시 부모도 활성화."""
        root = (await client.post(URL, json={"mrn": "urn:mrn:test:x", "active": False})).json()
        await client.post(URL, json={"mrn": "urn:mrn:test:x:y", "parent_id": root["id"], "active": True})
        res = await client.get(f"{URL}/{root['id']}")
        assert res.json()["active"] is True

    async def test_create_duplicate_mrn(self, client: AsyncClient, areas):
        """중복 MRN 생성 시 409."""
        res = await client.post(URL, json={"mrn": AREA})
        assert res.status_code == 409

    async def test_create_unknown_parent(self, client: AsyncClient):
        """존재하지 않는 부모 지정 시 404."""
        res = await client.post(URL, json={"mrn": "urn:mrn:test:orphan", "parent_id": str(uuid.uuid4())})
        assert res.status_code == 404

    async def test_create_duplicate_language(self, client: AsyncClient):
        """같은 언어 이름 두 개는 422."""
        res = await client.post(URL, json={"mrn": "urn:mrn:test:dup", "descs": [desc("A"), desc("B")]})
        assert res.status_code == 422


class TestAreaRead:
    """영역 조회 테스트."""

    async def test_list_roots_first(self, client: AsyncClient, areas):
        res = await client.get(URL)
        assert res.status_code == 200
        data = res.json()
        assert len(data) == 4
        assert data[0]["mrn"] == AREA

    async def test_list_filter_active(self, client: AsyncClient, areas):
        await client.put(f"{URL}/{areas[f'{AREA}:south'].id}/active", json={"active": False})
        res = await client.get(URL, params={"active": "false"})
        assert [n["mrn"] for n in res.json()] == [f"{AREA}:south"]

    async def test_get_nonexistent(self, client: AsyncClient):
        res = await client.get(f"{URL}/{uuid.uuid4()}")
        assert res.status_code == 404

    async def test_subtree(self, client: AsyncClient, areas):
        """하위 트리 조회는 자기 자신과 자손만."""
        res = await client.get(f"{URL}/{areas[f'{AREA}:north'].id}/subtree")
        assert res.status_code == 200
        assert {n["mrn"] for n in res.json()} == {f"{AREA}:north", f"{AREA}:north:skagen"}


class TestAreaUpdate:
    """영역 수정 테스트."""

    async def test_update_names(self, client: AsyncClient, areas):
        node = areas[f"{AREA}:south"]
        res = await client.put(f"{URL}/{node.id}", json={"descs": [desc("South Sea"), desc("Sydhavet", "da")]})
        assert res.status_code == 200
        names = {d["lang"]: d["name"] for d in res.json()["descs"]}
        assert names == {"en": "South Sea", "da": "Sydhavet"}

    async def test_update_mrn_duplicate(self, client: AsyncClient, areas):
        res = await client.put(f"{URL}/{areas[f'{AREA}:south'].id}", json={"mrn": f"{AREA}:north"})
        assert res.status_code == 409


class TestAreaMove:
    """영역 이동 테스트."""

    async def test_move_recomputes_lineage(self, client: AsyncClient, areas):
        """north를 south 아래로 옮기면 north와 자손의 lineage 갱신."""
        north, south = areas[f"{AREA}:north"], areas[f"{AREA}:south"]
        res = await client.put(f"{URL}/{north.id}/parent", json={"parent_id": str(south.id)})
        assert res.status_code == 200
        assert res.json()["lineage"] == f"{south.lineage}{north.id}/"

        skagen = (await client.get(f"{URL}/{areas[f'{AREA}:north:skagen'].id}")).json()
        assert skagen["lineage"] == f"{south.lineage}{north.id}/{skagen['id']}/"

    async def test_move_to_root(self, client: AsyncClient, areas):
        north = areas[f"{AREA}:north"]
        res = await client.put(f"{URL}/{north.id}/parent", json={"parent_id": None})
        assert res.json()["lineage"] == f"/{north.id}/"

    async def test_move_under_descendant(self, client: AsyncClient, areas):
        """자손 아래로 이동 시 400, 변경 없음."""
        root, skagen = areas[AREA], areas[f"{AREA}:north:skagen"]
        res = await client.put(f"{URL}/{root.id}/parent", json={"parent_id": str(skagen.id)})
        assert res.status_code == 400
        assert (await client.get(f"{URL}/{root.id}")).json()["parent_id"] is None

    async def test_move_under_inactive_parent(self, client: AsyncClient, areas):
        """비활성 부모 아래로 이동하면 하위 트리 비활성화."""
        north, south = areas[f"{AREA}:north"], areas[f"{AREA}:south"]
        await client.put(f"{URL}/{south.id}/active", json={"active": False})
        res = await client.put(f"{URL}/{north.id}/parent", json={"parent_id": str(south.id)})
        assert res.json()["active"] is False
        skagen = (await client.get(f"{URL}/{areas[f'{AREA}:north:skagen'].id}")).json()
        assert skagen["active"] is False


class TestAreaActivation:
    """영역 활성 상태 전파 테스트."""

    async def test_deactivate_cascades(self, client: AsyncClient, areas):
        north, skagen = areas[f"{AREA}:north"], areas[f"{AREA}:north:skagen"]
        res = await client.put(f"{URL}/{north.id}/active", json={"active": False})
        assert res.status_code == 200
        assert set(res.json()["changed"]) == {str(north.id), str(skagen.id)}
        assert (await client.get(f"{URL}/{areas[AREA].id}")).json()["active"] is True

    async def test_activate_cascades_up(self, client: AsyncClient, areas):
        root, skagen = areas[AREA], areas[f"{AREA}:north:skagen"]
        await client.put(f"{URL}/{root.id}/active", json={"active": False})
        res = await client.put(f"{URL}/{skagen.id}/active", json={"active": True})
        assert set(res.json()["changed"]) == {str(skagen.id), str(areas[f"{AREA}:north"].id), str(root.id)}
        # 형제는 비활성 유지 — Siblings stay inactive
        assert (await client.get(f"{URL}/{areas[f'{AREA}:south'].id}")).json()["active"] is False


class TestAreaDelete:
    """영역 삭제 테스트."""

    async def test_delete_leaf(self, client: AsyncClient, areas):
        skagen = areas[f"{AREA}:north:skagen"]
        res = await client.delete(f"{URL}/{skagen.id}")
        assert res.status_code == 204
        assert (await client.get(f"{URL}/{skagen.id}")).status_code == 404

    async def test_delete_with_children(self, client: AsyncClient, areas):
        """자식이 있으면 400."""
        res = await client.delete(f"{URL}/{areas[f'{AREA}:north'].id}")
        assert res.status_code == 400

    async def test_delete_nonexistent(self, client: AsyncClient):
        res = await client.delete(f"{URL}/{uuid.uuid4()}")
        assert res.status_code == 404


class TestRebuildLineage:
    """lineage 재계산 테스트."""

    async def test_rebuild_repairs_stale_paths(self, client: AsyncClient, db: AsyncSession, areas):
        south = areas[f"{AREA}:south"]
        expected = south.lineage
        south.lineage = "/stale/"
        await db.commit()

        res = await client.post(f"{URL}/rebuild-lineage")
        assert res.status_code == 200
        assert res.json()["changed"] == 1
        assert (await client.get(f"{URL}/{south.id}")).json()["lineage"] == expected

    async def test_rebuild_consistent_tree(self, client: AsyncClient, areas):
        res = await client.post(f"{URL}/rebuild-lineage")
        assert res.json()["changed"] == 0


class TestCategories:
    """카테고리 트리 — 영역과 같은 엔드포인트."""

    async def test_category_tree(self, client: AsyncClient):
        url = "/api/v1/admin/categories"
        root = (await client.post(url, json={"mrn": "urn:mrn:test:cat", "descs": [desc("Aids")]})).json()
        child = (await client.post(url, json={"mrn": "urn:mrn:test:cat:buoy", "parent_id": root["id"]})).json()
        assert child["lineage"] == f"/{root['id']}/{child['id']}/"

        await client.put(f"{url}/{root['id']}/active", json={"active": False})
        assert (await client.get(f"{url}/{child['id']}")).json()["active"] is False
        # 영역 트리와 분리 — Independent of the area tree
        assert (await client.get(URL)).json() == []
