"""Tests for the HTTP surface."""

import json

from fastapi.testclient import TestClient

from permit_intake.main import app

client = TestClient(app)

APPLICATION = {
    "region": "06",
    "forest": "05",
    "district": "54",
    "type": "tempOutfitters",
    "applicantInfo": {
        "firstName": "Jane",
        "lastName": "Doe",
        "dayPhone": {"areaCode": 555, "number": 5551234},
        "emailAddress": "jane@example.com",
        "orgType": "Corporation",
        "mailingAddress": "1 Main St",
        "mailingCity": "Bend",
        "mailingState": "OR",
        "mailingZIP": "97701",
    },
    "tempOutfitterFields": {
        "individualIsCitizen": True,
        "smallBusiness": False,
        "activityDescription": "Guided fishing trips",
        "clientCharges": "$120 per day",
        "emergencyContact": {"name": "Sam", "phone": {"areaCode": 555, "number": 5559876}},
    },
}

PDF = ("application/pdf", b"%PDF-1.4 test document")


def _files(**names):
    return {field: (name, PDF[1], PDF[0]) for field, name in names.items()}


def test_health():
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "healthy"
    assert data["routes"] == ["noncommercial", "temp-outfitters"]


def test_list_file_slots():
    r = client.get("/api/v1/applications/temp-outfitters/files")
    assert r.status_code == 200
    slots = {slot["field"]: slot for slot in r.json()}
    assert list(slots) == ["guideIdentification", "operatingPlan", "liabilityInsurance"]
    assert slots["operatingPlan"]["requiredFile"] is True
    assert slots["guideIdentification"]["validExtensions"] == ["pdf", "doc", "docx", "rtf"]


def test_noncommercial_has_no_file_slots():
    r = client.get("/api/v1/applications/noncommercial/files")
    assert r.status_code == 200
    assert r.json() == []


def test_valid_submission():
    r = client.post(
        "/api/v1/applications/temp-outfitters/validate",
        data={"body": json.dumps(APPLICATION)},
        files=_files(operatingPlan="plan.pdf", liabilityInsurance="insurance.pdf"),
    )
    assert r.status_code == 200
    assert r.json() == {"errors": [], "message": ""}


def test_invalid_submission_returns_errors_and_summary():
    application = json.loads(json.dumps(APPLICATION))
    del application["applicantInfo"]["lastName"]
    r = client.post(
        "/api/v1/applications/temp-outfitters/validate",
        data={"body": json.dumps(application)},
        files=_files(operatingPlan="plan.exe"),
    )
    assert r.status_code == 400
    data = r.json()
    assert data["errors"][0] == {
        "field": "applicantInfo.lastName",
        "errorType": "missing",
        "message": "Applicant Info/Last Name is a required field.",
    }
    assert data["errors"][1]["errorType"] == "invalidExtension"
    assert data["errors"][1]["expectedFieldType"] == ["pdf", "doc", "docx", "rtf"]
    assert data["message"] == (
        "Applicant Info/Last Name is a required field. "
        "Operating Plan must be one of the following extensions: pdf, doc, docx, rtf. "
        "Liability Insurance is a required file."
    )


def test_unknown_route():
    r = client.post("/api/v1/applications/hunting/validate", data={"body": "{}"})
    assert r.status_code == 404


def test_body_must_be_json():
    r = client.post("/api/v1/applications/noncommercial/validate", data={"body": "not json"})
    assert r.status_code == 400


def test_body_field_is_required():
    r = client.post("/api/v1/applications/noncommercial/validate", data={"other": "{}"})
    assert r.status_code == 400
