# tests/domains/test_inv_n.py

"""
'inv' 도메인 (원자재/드럼/완제품/재고 이동) 관련 API 엔드포인트에 대한 통합 테스트 모듈입니다.

- 기준 정보: 원자재, 완제품 CRUD 및 권한
- 재고 이동: IN / OUT / ADJUSTMENT, 재고 부족, BULK/DRUM 규칙
- 드럼 입고, 이동 정정/삭제, 일자별 편집, 정합성 검사
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.inv import models as inv_models
from app.domains.loc import models as loc_models

RAW_MATERIALS_URL = "/api/v1/inv/raw_materials"
FINISHED_GOODS_URL = "/api/v1/inv/finished_goods"
MOVEMENTS_URL = "/api/v1/inv/stock_movements"
DRUM_STOCK_IN_URL = "/api/v1/inv/drum_stock_in"


async def post_movement(client: AsyncClient, **payload):
    return await client.post(MOVEMENTS_URL, json=payload)


async def material_stock(client: AsyncClient, material_id: int) -> Decimal:
    response = await client.get(f"{RAW_MATERIALS_URL}/{material_id}")
    assert response.status_code == 200
    return Decimal(response.json()["current_stock"])


async def stock_in_drums(client: AsyncClient, material_id: int, drums, day: str = "2024-03-01"):
    response = await client.post(DRUM_STOCK_IN_URL, json={
        "raw_material_id": material_id,
        "date": day,
        "drums": [{"label": label, "quantity": quantity} for label, quantity in drums],
    })
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# 1. 기준 정보 (원자재 / 완제품)
# =============================================================================
@pytest.mark.asyncio
async def test_create_raw_material_success_admin(admin_client: AsyncClient):
    """관리자는 원자재를 생성할 수 있으며 초기 재고는 0입니다."""
    response = await admin_client.post(RAW_MATERIALS_URL, json={
        "code": "RM-100",
        "name": "Titanium Dioxide",
        "kind": "DRUM",
        "moq": "200",
    })

    assert response.status_code == 201
    created = response.json()
    assert created["code"] == "RM-100"
    assert created["kind"] == "DRUM"
    assert Decimal(created["current_stock"]) == Decimal("0")
    assert Decimal(created["moq"]) == Decimal("200")


@pytest.mark.asyncio
async def test_create_raw_material_duplicate_code(
    admin_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    response = await admin_client.post(RAW_MATERIALS_URL, json={"code": "RM-BULK", "name": "Copy"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_raw_material_forbidden_for_factory(factory_client: AsyncClient):
    response = await factory_client.post(RAW_MATERIALS_URL, json={"code": "RM-X", "name": "X"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_read_raw_materials_paginated(
    office_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
    drum_material: inv_models.RawMaterial,
):
    """목록은 {items, pagination} 형태로 반환됩니다."""
    response = await office_client.get(RAW_MATERIALS_URL, params={"page": 1, "limit": 1})

    assert response.status_code == 200
    page = response.json()
    assert len(page["items"]) == 1
    assert page["pagination"]["total"] == 2
    assert page["pagination"]["total_pages"] == 2
    assert page["pagination"]["has_more"] is True


@pytest.mark.asyncio
async def test_update_raw_material_keeps_kind(
    admin_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """원자재 종류는 생성 후 변경되지 않습니다."""
    material_id = bulk_material.id

    response = await admin_client.put(
        f"{RAW_MATERIALS_URL}/{material_id}",
        json={"name": "Bulk Resin v2", "kind": "DRUM"},
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Bulk Resin v2"
    assert updated["kind"] == "BULK"


@pytest.mark.asyncio
async def test_delete_raw_material_without_history(
    admin_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id

    response = await admin_client.delete(f"{RAW_MATERIALS_URL}/{material_id}")
    assert response.status_code == 204

    response = await admin_client.get(f"{RAW_MATERIALS_URL}/{material_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_raw_material_with_history_rejected(
    admin_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id
    response = await post_movement(
        admin_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="10"
    )
    assert response.status_code == 201

    response = await admin_client.delete(f"{RAW_MATERIALS_URL}/{material_id}")
    assert response.status_code == 422
    assert response.json()["detail"] == "Cannot delete raw material with movement history."


@pytest.mark.asyncio
async def test_create_finished_good_and_duplicate(
    admin_client: AsyncClient,
    finished_good: inv_models.FinishedGood,
):
    response = await admin_client.post(FINISHED_GOODS_URL, json={"code": "FG-002", "name": "Coating B"})
    assert response.status_code == 201
    assert Decimal(response.json()["current_stock"]) == Decimal("0")

    response = await admin_client.post(FINISHED_GOODS_URL, json={"code": "FG-001", "name": "Again"})
    assert response.status_code == 409


# =============================================================================
# 2. 재고 이동 (IN / OUT / ADJUSTMENT)
# =============================================================================
@pytest.mark.asyncio
async def test_stock_in_and_out_bulk(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """IN은 재고를 늘리고 OUT은 줄입니다."""
    material_id = bulk_material.id

    response = await post_movement(
        factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100"
    )
    assert response.status_code == 201
    movement = response.json()
    assert movement["type"] == "IN"
    assert Decimal(movement["quantity"]) == Decimal("100")
    assert movement["batch_id"] is None

    response = await post_movement(
        factory_client, type="OUT", date="2024-03-02", raw_material_id=material_id, quantity="30"
    )
    assert response.status_code == 201

    assert await material_stock(factory_client, material_id) == Decimal("70")


@pytest.mark.asyncio
async def test_stock_out_insufficient(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """가용 재고보다 많은 OUT은 400으로 거부되고 재고는 바뀌지 않습니다."""
    material_id = bulk_material.id
    await post_movement(factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100")

    response = await post_movement(
        factory_client, type="OUT", date="2024-03-02", raw_material_id=material_id, quantity="150"
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "Insufficient stock for Bulk Resin" in detail
    assert "Available: 100" in detail
    assert "Required: 150" in detail
    assert await material_stock(factory_client, material_id) == Decimal("100")


@pytest.mark.asyncio
async def test_backdated_out_rejected_when_history_goes_negative(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """현재 재고가 충분해도 과거 시점의 잔고가 음수가 되는 소급 OUT은 거부됩니다."""
    material_id = bulk_material.id
    await post_movement(factory_client, type="IN", date="2024-03-10", raw_material_id=material_id, quantity="50")

    response = await post_movement(
        factory_client, type="OUT", date="2024-03-05", raw_material_id=material_id, quantity="40"
    )

    assert response.status_code == 400
    assert "Required: 40" in response.json()["detail"]
    assert await material_stock(factory_client, material_id) == Decimal("50")


@pytest.mark.asyncio
async def test_adjustment_records_signed_delta(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """ADJUSTMENT는 실사 수량과 현재 재고의 차이를 부호 있는 수량으로 기록합니다."""
    material_id = bulk_material.id
    await post_movement(factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100")

    response = await post_movement(
        factory_client, type="ADJUSTMENT", date="2024-03-03",
        raw_material_id=material_id, counted_quantity="92.5",
    )
    assert response.status_code == 201
    assert Decimal(response.json()["quantity"]) == Decimal("-7.5")
    assert await material_stock(factory_client, material_id) == Decimal("92.5")

    response = await post_movement(
        factory_client, type="ADJUSTMENT", date="2024-03-04",
        raw_material_id=material_id, counted_quantity="120",
    )
    assert response.status_code == 201
    assert Decimal(response.json()["quantity"]) == Decimal("27.5")
    assert await material_stock(factory_client, material_id) == Decimal("120")


@pytest.mark.asyncio
async def test_adjustment_without_change_rejected(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id
    await post_movement(factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="10")

    response = await post_movement(
        factory_client, type="ADJUSTMENT", date="2024-03-02",
        raw_material_id=material_id, counted_quantity="10",
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_movement_payload_validation(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
    finished_good: inv_models.FinishedGood,
):
    """품목 지정과 수량 필드 조합이 잘못되면 422 입니다."""
    material_id = bulk_material.id
    good_id = finished_good.id

    # 원자재와 완제품을 동시에 지정
    response = await post_movement(
        factory_client, type="IN", date="2024-03-01",
        raw_material_id=material_id, finished_good_id=good_id, quantity="1",
    )
    assert response.status_code == 422

    # ADJUSTMENT에 quantity 사용
    response = await post_movement(
        factory_client, type="ADJUSTMENT", date="2024-03-01", raw_material_id=material_id, quantity="1",
    )
    assert response.status_code == 422

    # 0 이하 수량
    response = await post_movement(
        factory_client, type="OUT", date="2024-03-01", raw_material_id=material_id, quantity="0",
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_office_user_cannot_move_stock(
    office_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    response = await post_movement(
        office_client, type="IN", date="2024-03-01", raw_material_id=bulk_material.id, quantity="5"
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_item_is_not_found(factory_client: AsyncClient):
    response = await post_movement(
        factory_client, type="IN", date="2024-03-01", raw_material_id=999999, quantity="5"
    )
    assert response.status_code == 404


# =============================================================================
# 3. BULK / DRUM 규칙과 드럼 입고
# =============================================================================
@pytest.mark.asyncio
async def test_drum_rules_enforced(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
    drum_material: inv_models.RawMaterial,
):
    """DRUM 원자재는 드럼 지정이 필수이고, BULK 원자재는 드럼을 지정할 수 없습니다."""
    bulk_id = bulk_material.id
    drum_material_id = drum_material.id
    result = await stock_in_drums(factory_client, drum_material_id, [("D-1", "50")])
    drum_id = result["drums"][0]["id"]

    response = await post_movement(
        factory_client, type="OUT", date="2024-03-02", raw_material_id=drum_material_id, quantity="5"
    )
    assert response.status_code == 422
    assert "A drum must be selected" in response.json()["detail"]

    response = await post_movement(
        factory_client, type="IN", date="2024-03-02",
        raw_material_id=bulk_id, drum_id=drum_id, quantity="5",
    )
    assert response.status_code == 422
    assert "is not drum-tracked" in response.json()["detail"]


@pytest.mark.asyncio
async def test_drum_stock_in(
    factory_client: AsyncClient,
    drum_material: inv_models.RawMaterial,
):
    """드럼 입고는 드럼마다 IN 이동을 만들고 원자재 재고는 드럼 합계가 됩니다."""
    material_id = drum_material.id

    result = await stock_in_drums(factory_client, material_id, [("D-1", "30"), ("D-2", "20")])

    assert Decimal(result["current_stock"]) == Decimal("50")
    assert [drum["label"] for drum in result["drums"]] == ["D-1", "D-2"]
    assert all(drum["is_active"] for drum in result["drums"])
    assert len(result["movement_ids"]) == 2

    response = await factory_client.get(f"{RAW_MATERIALS_URL}/{material_id}/drums")
    assert response.status_code == 200
    drums = response.json()
    assert [drum["label"] for drum in drums] == ["D-1", "D-2"]
    assert sum(Decimal(drum["current_quantity"]) for drum in drums) == Decimal("50")


@pytest.mark.asyncio
async def test_drum_stock_in_duplicate_labels(
    factory_client: AsyncClient,
    drum_material: inv_models.RawMaterial,
):
    material_id = drum_material.id
    await stock_in_drums(factory_client, material_id, [("D-1", "30")])

    response = await factory_client.post(DRUM_STOCK_IN_URL, json={
        "raw_material_id": material_id,
        "date": "2024-03-02",
        "drums": [{"label": "D-1", "quantity": "10"}],
    })
    assert response.status_code == 409

    response = await factory_client.post(DRUM_STOCK_IN_URL, json={
        "raw_material_id": material_id,
        "date": "2024-03-02",
        "drums": [{"label": "D-9", "quantity": "10"}, {"label": "D-9", "quantity": "5"}],
    })
    assert response.status_code == 409
    assert await material_stock(factory_client, material_id) == Decimal("30")


@pytest.mark.asyncio
async def test_drum_stock_in_rejects_bulk_material(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    response = await factory_client.post(DRUM_STOCK_IN_URL, json={
        "raw_material_id": bulk_material.id,
        "date": "2024-03-01",
        "drums": [{"label": "D-1", "quantity": "10"}],
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_emptied_drum_becomes_inactive(
    factory_client: AsyncClient,
    drum_material: inv_models.RawMaterial,
):
    """드럼 수량이 0이 되면 비활성화되고, active_only 조회에서 빠집니다."""
    material_id = drum_material.id
    result = await stock_in_drums(factory_client, material_id, [("D-1", "30"), ("D-2", "20")])
    first_drum_id = result["drums"][0]["id"]

    response = await post_movement(
        factory_client, type="OUT", date="2024-03-02",
        raw_material_id=material_id, drum_id=first_drum_id, quantity="30",
    )
    assert response.status_code == 201

    response = await factory_client.get(
        f"{RAW_MATERIALS_URL}/{material_id}/drums", params={"active_only": True}
    )
    assert [drum["label"] for drum in response.json()] == ["D-2"]
    assert await material_stock(factory_client, material_id) == Decimal("20")


@pytest.mark.asyncio
async def test_drum_out_insufficient_names_drum(
    factory_client: AsyncClient,
    drum_material: inv_models.RawMaterial,
):
    material_id = drum_material.id
    result = await stock_in_drums(factory_client, material_id, [("D-1", "10"), ("D-2", "40")])
    first_drum_id = result["drums"][0]["id"]

    response = await post_movement(
        factory_client, type="OUT", date="2024-03-02",
        raw_material_id=material_id, drum_id=first_drum_id, quantity="15",
    )

    assert response.status_code == 400
    assert "drum D-1" in response.json()["detail"]


@pytest.mark.asyncio
async def test_finished_good_location_stock(
    factory_client: AsyncClient,
    finished_good: inv_models.FinishedGood,
    test_location: loc_models.Location,
    test_location_b: loc_models.Location,
):
    """위치를 지정한 완제품 이동은 위치별 재고와 품목 재고를 함께 바꿉니다."""
    good_id = finished_good.id
    location_a = test_location.id
    location_b = test_location_b.id

    for location_id, quantity in ((location_a, "10"), (location_b, "4")):
        response = await post_movement(
            factory_client, type="IN", date="2024-03-01",
            finished_good_id=good_id, location_id=location_id, quantity=quantity,
        )
        assert response.status_code == 201

    response = await post_movement(
        factory_client, type="OUT", date="2024-03-02",
        finished_good_id=good_id, location_id=location_b, quantity="5",
    )
    assert response.status_code == 400

    response = await factory_client.get(f"{FINISHED_GOODS_URL}/{good_id}")
    assert Decimal(response.json()["current_stock"]) == Decimal("14")

    response = await factory_client.get(f"{FINISHED_GOODS_URL}/{good_id}/stocks")
    stocks = {s["location_id"]: Decimal(s["quantity"]) for s in response.json()}
    assert stocks == {location_a: Decimal("10"), location_b: Decimal("4")}


# =============================================================================
# 4. 이동 정정 / 삭제
# =============================================================================
@pytest.mark.asyncio
async def test_update_movement_quantity(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """정정은 기존 행을 새 행으로 교체하고 재고에 순 변화량만 반영합니다."""
    material_id = bulk_material.id
    response = await post_movement(
        factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100"
    )
    original = response.json()

    response = await factory_client.put(
        f"{MOVEMENTS_URL}/{original['id']}",
        json={"quantity": "60", "description": "recounted"},
    )

    assert response.status_code == 200
    replaced = response.json()
    assert replaced["id"] != original["id"]
    assert Decimal(replaced["quantity"]) == Decimal("60")
    assert replaced["description"] == "recounted"
    assert replaced["created_at"] == original["created_at"]
    assert await material_stock(factory_client, material_id) == Decimal("60")

    response = await factory_client.get(f"{MOVEMENTS_URL}/{original['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_movement_rejected_when_stock_would_go_negative(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id
    response = await post_movement(
        factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100"
    )
    in_id = response.json()["id"]
    await post_movement(factory_client, type="OUT", date="2024-03-02", raw_material_id=material_id, quantity="80")

    response = await factory_client.put(f"{MOVEMENTS_URL}/{in_id}", json={"quantity": "50"})

    assert response.status_code == 409
    assert await material_stock(factory_client, material_id) == Decimal("20")


@pytest.mark.asyncio
async def test_update_adjustment_requires_counted_quantity(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id
    await post_movement(factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100")
    response = await post_movement(
        factory_client, type="ADJUSTMENT", date="2024-03-02", raw_material_id=material_id, counted_quantity="90"
    )
    adjustment_id = response.json()["id"]

    response = await factory_client.put(f"{MOVEMENTS_URL}/{adjustment_id}", json={"quantity": "5"})
    assert response.status_code == 422

    # 기존 조정을 제외한 재고(100) 기준으로 다시 계산합니다.
    response = await factory_client.put(f"{MOVEMENTS_URL}/{adjustment_id}", json={"counted_quantity": "95"})
    assert response.status_code == 200
    assert Decimal(response.json()["quantity"]) == Decimal("-5")
    assert await material_stock(factory_client, material_id) == Decimal("95")


@pytest.mark.asyncio
async def test_delete_movement(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id
    await post_movement(factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100")
    response = await post_movement(
        factory_client, type="OUT", date="2024-03-02", raw_material_id=material_id, quantity="30"
    )
    out_id = response.json()["id"]

    response = await factory_client.delete(f"{MOVEMENTS_URL}/{out_id}")

    assert response.status_code == 204
    assert await material_stock(factory_client, material_id) == Decimal("100")


@pytest.mark.asyncio
async def test_delete_movement_rejected_when_stock_would_go_negative(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """삭제로 재고가 음수가 되면 보정 없이 409로 거부됩니다."""
    material_id = bulk_material.id
    response = await post_movement(
        factory_client, type="IN", date="2024-03-01", raw_material_id=material_id, quantity="100"
    )
    in_id = response.json()["id"]
    await post_movement(factory_client, type="OUT", date="2024-03-02", raw_material_id=material_id, quantity="80")

    response = await factory_client.delete(f"{MOVEMENTS_URL}/{in_id}")

    assert response.status_code == 409
    assert await material_stock(factory_client, material_id) == Decimal("20")
    response = await factory_client.get(f"{MOVEMENTS_URL}/{in_id}")
    assert response.status_code == 200


# =============================================================================
# 5. 일자별 편집 (by_date)
# =============================================================================
@pytest.mark.asyncio
async def test_by_date_upsert_and_delete(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    """같은 영업일/유형의 수동 이동을 생성, 수정, 삭제합니다."""
    material_id = bulk_material.id
    by_date_url = f"{MOVEMENTS_URL}/by_date"

    response = await factory_client.put(by_date_url, json={
        "type": "IN", "date": "2024-04-01", "quantity": "40", "raw_material_id": material_id,
    })
    assert response.status_code == 200
    created = response.json()
    assert Decimal(created["movement"]["quantity"]) == Decimal("40")
    assert created["deleted_count"] == 0

    response = await factory_client.put(by_date_url, json={
        "type": "IN", "date": "2024-04-01", "quantity": "25", "raw_material_id": material_id,
    })
    assert response.status_code == 200
    assert Decimal(response.json()["movement"]["quantity"]) == Decimal("25")
    assert await material_stock(factory_client, material_id) == Decimal("25")

    response = await factory_client.get(by_date_url, params={
        "date": "2024-04-01", "raw_material_id": material_id,
    })
    assert response.status_code == 200
    assert len(response.json()) == 1

    response = await factory_client.delete(by_date_url, params={
        "date": "2024-04-01", "type": "IN", "raw_material_id": material_id,
    })
    assert response.status_code == 200
    assert response.json() == {"deleted_count": 1}
    assert await material_stock(factory_client, material_id) == Decimal("0")


@pytest.mark.asyncio
async def test_by_date_zero_quantity_deletes(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id
    by_date_url = f"{MOVEMENTS_URL}/by_date"
    await post_movement(factory_client, type="IN", date="2024-04-02", raw_material_id=material_id, quantity="15")

    response = await factory_client.put(by_date_url, json={
        "type": "IN", "date": "2024-04-02", "quantity": "0", "raw_material_id": material_id,
    })

    assert response.status_code == 200
    assert response.json() == {"movement": None, "deleted_count": 1}
    assert await material_stock(factory_client, material_id) == Decimal("0")


@pytest.mark.asyncio
async def test_by_date_rejects_multiple_matches(
    factory_client: AsyncClient,
    bulk_material: inv_models.RawMaterial,
):
    material_id = bulk_material.id
    for quantity in ("10", "20"):
        await post_movement(
            factory_client, type="IN", date="2024-04-03", raw_material_id=material_id, quantity=quantity
        )

    response = await factory_client.put(f"{MOVEMENTS_URL}/by_date", json={
        "type": "IN", "date": "2024-04-03", "quantity": "5", "raw_material_id": material_id,
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_by_date_requires_single_item(factory_client: AsyncClient):
    response = await factory_client.get(f"{MOVEMENTS_URL}/by_date", params={"date": "2024-04-01"})
    assert response.status_code == 422


# =============================================================================
# 6. 정합성 검사
# =============================================================================
@pytest.mark.asyncio
async def test_stock_reconciliation_in_sync(
    admin_client: AsyncClient,
    db_session: AsyncSession,
    bulk_material: inv_models.RawMaterial,
    drum_material: inv_models.RawMaterial,
):
    """ARQ 풀이 없으면 정합성 검사를 즉시 실행하여 결과를 돌려줍니다."""
    await post_movement(
        admin_client, type="IN", date="2024-03-01", raw_material_id=bulk_material.id, quantity="10"
    )
    await stock_in_drums(admin_client, drum_material.id, [("D-1", "7")])

    response = await admin_client.post("/api/v1/inv/stock_reconciliations")

    assert response.status_code == 202
    result = response.json()
    assert result["status"] == "success"
    assert result["mismatches"] == []
    assert result["checked"] >= 3
