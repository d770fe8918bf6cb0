"""Tests for the machine schedule endpoints."""

import json

import pytest
from httpx import AsyncClient

from shopfloor.services.schedule import MACHINE_LIST_QUERY

pytestmark = pytest.mark.asyncio


class TestScheduleMachines:
    """Tests for GET /api/schedule/machines."""

    async def test_lists_machines(self, client: AsyncClient, invoker):
        invoker.responses[MACHINE_LIST_QUERY] = [
            {"machineId": 11, "machineName": "Bobst Folder"},
            {"MachineID": 12, "MachineName": None},
        ]

        response = await client.get("/api/schedule/machines", params={"database": "ahm"})

        assert response.status_code == 200
        assert response.json() == {
            "status": True,
            "machines": [
                {"machineId": 11, "machineName": "Bobst Folder"},
                {"machineId": 12, "machineName": ""},
            ],
        }
        assert invoker.calls[-1].partition.value == "AHM"

    async def test_defaults_to_kol(self, client: AsyncClient, invoker):
        await client.get("/api/schedule/machines")

        assert invoker.calls[-1].partition.value == "KOL"

    async def test_rejects_bad_database(self, client: AsyncClient, invoker):
        response = await client.get("/api/schedule/machines", params={"database": "LON"})

        assert response.status_code == 400
        assert invoker.calls == []

    async def test_database_error(self, client: AsyncClient, invoker):
        invoker.responses[MACHINE_LIST_QUERY] = RuntimeError("Invalid object name 'dbo.MachineMaster'")

        response = await client.get("/api/schedule/machines")

        assert response.status_code == 500
        assert response.json() == {"status": False, "error": "Invalid object name 'dbo.MachineMaster'"}


class TestMachineSchedule:
    """Tests for GET /api/schedule/machine/{machine_id}."""

    async def test_returns_procedure_rows(self, client: AsyncClient, invoker):
        rows = [{"JobBookingJobCardContentsID": 44, "Seq": 1, "JobName": "Cartons"}]
        invoker.responses["dbo.GetMachineScheduleData"] = rows

        response = await client.get("/api/schedule/machine/7")

        assert response.status_code == 200
        assert response.json() == {"status": True, "machineId": 7, "rows": rows}
        call = invoker.calls[-1]
        assert call.procedure == "dbo.GetMachineScheduleData"
        assert call.params == {"MachineID": 7}

    @pytest.mark.parametrize("machine_id", ["abc", "-1", "1.5"])
    async def test_rejects_bad_machine_id(self, client: AsyncClient, invoker, machine_id):
        response = await client.get(f"/api/schedule/machine/{machine_id}")

        assert response.status_code == 400
        assert response.json() == {"status": False, "error": "Valid machineId is required"}
        assert invoker.calls == []

    async def test_database_error_uses_fallback_message(self, client: AsyncClient, invoker):
        invoker.responses["dbo.GetMachineScheduleData"] = RuntimeError()

        response = await client.get("/api/schedule/machine/7")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch schedule"


class TestReorder:
    """Tests for POST /api/schedule/reorder."""

    async def test_saves_order_with_positions(self, client: AsyncClient, invoker):
        response = await client.post(
            "/api/schedule/reorder",
            json={"database": "AHM", "machineId": "7", "orderedJobIds": [30, "10", 20]},
        )

        assert response.status_code == 200
        assert response.json() == {"status": True}
        call = invoker.calls[-1]
        assert call.procedure == "dbo.usp_UpdateMachineJobSequence"
        assert call.partition.value == "AHM"
        assert call.params["MachineID"] == 7
        assert json.loads(call.params["OrderedJobsJSON"]) == [
            {"id": 30, "pos": 1},
            {"id": 10, "pos": 2},
            {"id": 20, "pos": 3},
        ]

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ({"machineId": "x", "orderedJobIds": [1]}, "Valid machineId is required"),
            ({"machineId": 7, "orderedJobIds": []}, "orderedJobIds must be a non-empty array"),
            ({"machineId": 7, "orderedJobIds": "1,2"}, "orderedJobIds must be a non-empty array"),
            ({"machineId": 7, "orderedJobIds": [1, "two"]}, "All orderedJobIds must be numbers"),
            ({"orderedJobIds": [1]}, "machineId is required"),
        ],
    )
    async def test_validation(self, client: AsyncClient, invoker, body, message):
        response = await client.post("/api/schedule/reorder", json=body)

        assert response.status_code == 400
        assert response.json() == {"status": False, "error": message}
        assert invoker.calls == []

    async def test_procedure_error(self, client: AsyncClient, invoker):
        invoker.responses["dbo.usp_UpdateMachineJobSequence"] = RuntimeError("Job 10 is not on machine 7")

        response = await client.post("/api/schedule/reorder", json={"machineId": 7, "orderedJobIds": [10]})

        assert response.status_code == 500
        assert response.json()["error"] == "Job 10 is not on machine 7"


class TestChangeMachine:
    """Tests for POST /api/schedule/change-machine."""

    async def test_moves_jobs(self, client: AsyncClient, invoker):
        response = await client.post(
            "/api/schedule/change-machine",
            json={"sourceMachineId": 7, "targetMachineId": 9, "jobIds": [123, 456]},
        )

        assert response.status_code == 200
        assert response.json() == {"status": True}
        call = invoker.calls[-1]
        assert call.procedure == "dbo.usp_ChangeJobMachine"
        assert call.partition.value == "KOL"
        assert call.params == {"SourceMachineID": 7, "TargetMachineID": 9, "JobIdsJSON": "[123,456]"}

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ({"sourceMachineId": -1, "targetMachineId": 9, "jobIds": [1]}, "Valid sourceMachineId is required"),
            ({"sourceMachineId": 7, "targetMachineId": "b", "jobIds": [1]}, "Valid targetMachineId is required"),
            ({"sourceMachineId": 7, "targetMachineId": 7, "jobIds": [1]}, "sourceMachineId and targetMachineId must differ"),
            ({"sourceMachineId": 7, "targetMachineId": 9, "jobIds": []}, "jobIds must be a non-empty array"),
            ({"sourceMachineId": 7, "targetMachineId": 9, "jobIds": [None]}, "All jobIds must be numbers"),
        ],
    )
    async def test_validation(self, client: AsyncClient, invoker, body, message):
        response = await client.post("/api/schedule/change-machine", json=body)

        assert response.status_code == 400
        assert response.json() == {"status": False, "error": message}
        assert invoker.calls == []

    async def test_rejects_bad_database(self, client: AsyncClient, invoker):
        response = await client.post(
            "/api/schedule/change-machine",
            json={"database": "LON", "sourceMachineId": 7, "targetMachineId": 9, "jobIds": [1]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid or missing database (must be KOL or AHM)"
