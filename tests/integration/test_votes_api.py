"""Integration tests for /api/votes."""

from datetime import timedelta


class TestCastVote:
    async def test_vote_and_verify(self, client, voter_headers, create_election):
        election = await create_election(start=timedelta(hours=-1), end=timedelta(hours=1))
        resp = await client.post("/api/votes", json={
            "electionId": election["id"], "encryptedChoice": "ciphertext",
        }, headers=voter_headers)
        assert resp.status_code == 201
        receipt = resp.json()
        assert receipt["message"] == "Vote recorded successfully"
        assert len(receipt["verificationCode"]) == 10

        resp = await client.get(f"/api/votes/verify/{receipt['verificationCode']}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["verified"] is True
        assert data["vote"]["voteId"] == receipt["voteId"]
        assert data["vote"]["electionTitle"] == "Board Election"
        assert "encryptedChoice" not in data["vote"]

    async def test_duplicate(self, client, voter_headers, create_election):
        election = await create_election(start=timedelta(hours=-1), end=timedelta(hours=1))
        body = {"electionId": election["id"], "encryptedChoice": "ciphertext"}
        assert (await client.post("/api/votes", json=body, headers=voter_headers)).status_code == 201
        resp = await client.post("/api/votes", json=body, headers=voter_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == "DUPLICATE_VOTE"

    async def test_two_voters(self, client, register_voter, create_election):
        election = await create_election(start=timedelta(hours=-1), end=timedelta(hours=1))
        body = {"electionId": election["id"], "encryptedChoice": "ciphertext"}
        codes = set()
        for email in ("one@example.com", "two@example.com"):
            headers = await register_voter(email)
            resp = await client.post("/api/votes", json=body, headers=headers)
            assert resp.status_code == 201
            codes.add(resp.json()["verificationCode"])
        assert len(codes) == 2

    async def test_before_start(self, client, voter_headers, create_election):
        election = await create_election(start=timedelta(hours=1), end=timedelta(hours=2))
        resp = await client.post("/api/votes", json={
            "electionId": election["id"], "encryptedChoice": "x",
        }, headers=voter_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "ELECTION_NOT_ACTIVE"

    async def test_after_end(self, client, voter_headers, create_election):
        election = await create_election(start=timedelta(hours=-2), end=timedelta(hours=-1))
        resp = await client.post("/api/votes", json={
            "electionId": election["id"], "encryptedChoice": "x",
        }, headers=voter_headers)
        assert resp.status_code == 400

    async def test_draft(self, client, voter_headers, create_election):
        election = await create_election(
            start=timedelta(hours=-1), end=timedelta(hours=1), status="draft",
        )
        resp = await client.post("/api/votes", json={
            "electionId": election["id"], "encryptedChoice": "x",
        }, headers=voter_headers)
        assert resp.status_code == 400

    async def test_requires_token(self, client):
        resp = await client.post("/api/votes", json={"electionId": "e", "encryptedChoice": "x"})
        assert resp.status_code == 401


class TestVerify:
    async def test_unknown_code(self, client):
        resp = await client.get("/api/votes/verify/NOPE000000")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Vote not found", "code": "NOT_FOUND"}
