from __future__ import annotations


def test_index_documents_authentication_and_rate_limit(api_client):
    data = api_client.get("/").json()

    assert data["name"] == "Enterprise API"
    assert data["authentication"]["header"] == "x-api-key"
    assert data["rateLimit"] == {
        "window": "15 minutes",
        "maxRequests": 100,
        "headers": ["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    }


def test_health_reports_uptime(api_client):
    data = api_client.get("/health").json()

    assert data["status"] == "UP"
    assert data["uptime"]["human"].endswith("s")
    assert data["environment"] == "development"
    assert data["timestamp"].endswith("Z")


def test_security_headers_on_every_response(make_client):
    client = make_client()

    for response in (client.get("/health"), client.get("/api/employees")):
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"


def test_unknown_route_lists_endpoints(api_client):
    response = api_client.get("/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Route Not Found"
    assert body["message"] == "Cannot GET /nope"
    assert "GET /api/departments/analysis/budget" in body["availableEndpoints"]
    assert body["requestId"] == response.headers["X-Request-ID"]


def test_invalid_query_parameter_is_rejected(api_client):
    response = api_client.get("/api/departments?sortBy=secret")

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation Error"
    assert body["details"][0]["field"] == "query.sortBy"


# Employees


def test_employee_search_matches_partial_name(api_client):
    response = api_client.get("/api/employees?search=ali")

    data = response.json()
    assert data["total"] == 1
    assert data["data"][0]["name"] == "Alice"


def test_employee_filters_combine(api_client):
    data = api_client.get(
        "/api/employees?department=engineering&status=active&minSalary=130000"
    ).json()

    assert [emp["name"] for emp in data["data"]] == ["Bob"]


def test_employee_sort_and_paginate(api_client):
    data = api_client.get("/api/employees?sortBy=salary&sortOrder=desc&limit=2&page=2").json()

    assert data["total"] == 4
    assert data["page"] == 2
    assert data["totalPages"] == 2
    assert [emp["name"] for emp in data["data"]] == ["Alice", "David"]


def test_get_employee_by_id(api_client):
    assert api_client.get("/api/employees/2").json()["data"]["role"] == "Manager"

    missing = api_client.get("/api/employees/99")
    assert missing.status_code == 404
    assert missing.json()["message"] == "No employee found with ID: 99"


def test_create_employee_assigns_next_id_and_defaults(api_client):
    response = api_client.post("/api/employees", json={"name": "Erin", "role": "Analyst"})

    assert response.status_code == 201
    employee = response.json()["data"]
    assert employee["id"] == 5
    assert employee["department"] == "Unassigned"
    assert employee["status"] == "active"
    assert api_client.get("/api/employees/5").status_code == 200


def test_create_employee_requires_name_and_role(api_client):
    response = api_client.post("/api/employees", json={"name": "Erin"})

    assert response.status_code == 400
    assert response.json()["required"] == ["name", "role"]


# Departments


def test_department_location_filter(api_client):
    data = api_client.get("/api/departments?location=ca").json()

    assert {dept["name"] for dept in data["data"]} == {"Engineering", "Marketing"}


def test_department_min_budget_and_sort(api_client):
    data = api_client.get("/api/departments?minBudget=1000000&sortBy=budget").json()

    assert [dept["name"] for dept in data["data"]] == ["Product", "Engineering"]


def test_department_string_sort_descending(api_client):
    data = api_client.get("/api/departments?sortBy=name&sortOrder=desc").json()

    assert [dept["name"] for dept in data["data"]] == ["Product", "Marketing", "Engineering"]


def test_get_department_not_found(api_client):
    response = api_client.get("/api/departments/42")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "Department not found",
        "message": "No department found with ID: 42",
    }


def test_create_department(api_client):
    response = api_client.post(
        "/api/departments",
        json={"name": "Legal", "description": "Contracts", "manager": "Eve", "budget": 300000},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Department created successfully"
    assert body["data"]["id"] == 4
    assert body["data"]["location"] == "Not specified"
    assert body["data"]["employeeCount"] == 0


def test_create_department_rejects_missing_fields(api_client):
    response = api_client.post("/api/departments", json={"name": "Legal"})

    assert response.status_code == 400
    assert response.json()["required"] == ["name", "description", "manager"]


def test_create_department_rejects_duplicate_name(api_client):
    response = api_client.post(
        "/api/departments",
        json={"name": "engineering", "description": "dup", "manager": "Someone"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "Department with this name already exists"


def test_update_department_changes_only_provided_fields(api_client):
    response = api_client.put("/api/departments/2", json={"budget": 0, "manager": ""})

    data = response.json()["data"]
    assert data["budget"] == 0
    assert data["manager"] == "Carol Davis"
    assert api_client.put("/api/departments/9", json={"name": "x"}).status_code == 404


def test_delete_department(api_client):
    response = api_client.delete("/api/departments/3")

    assert response.json()["data"]["name"] == "Marketing"
    assert api_client.get("/api/departments/3").status_code == 404
    assert api_client.delete("/api/departments/3").status_code == 404


def test_budget_analysis(api_client):
    data = api_client.get("/api/departments/analysis/budget").json()["data"]

    assert data["totalBudget"] == 4500000
    assert data["averageBudget"] == 1500000
    assert data["maxBudget"] == 2500000
    assert data["minBudget"] == 800000
    assert data["budgetByLocation"]["New York, NY"] == 1200000
    assert [item["percentage"] for item in data["budgetDistribution"]] == [56, 27, 18]


def test_budget_analysis_with_no_departments(api_client):
    for department_id in (1, 2, 3):
        api_client.delete(f"/api/departments/{department_id}")

    data = api_client.get("/api/departments/analysis/budget").json()["data"]

    assert data["totalBudget"] == 0
    assert data["averageBudget"] == 0
    assert data["budgetDistribution"] == []


def test_create_employee_rejects_unknown_status_and_bad_date(api_client):
    bad_status = api_client.post(
        "/api/employees", json={"name": "Zed", "role": "X", "status": "retired"}
    )
    bad_date = api_client.post(
        "/api/employees", json={"name": "Zed", "role": "X", "startDate": "not-a-date"}
    )

    assert bad_status.status_code == 400
    assert bad_date.status_code == 400
    assert api_client.get("/api/employees").json()["total"] == 4


def test_create_employee_stores_start_date_as_iso_string(api_client):
    response = api_client.post(
        "/api/employees",
        json={"name": "Zed", "role": "X", "status": "inactive", "startDate": "2024-02-29"},
    )

    employee = response.json()["data"]
    assert employee["startDate"] == "2024-02-29"
    assert employee["status"] == "inactive"


def test_blank_required_fields_are_missing(api_client):
    department = api_client.post(
        "/api/departments", json={"name": "   ", "description": "d", "manager": "m"}
    )
    employee = api_client.post("/api/employees", json={"name": "Zed", "role": " "})

    assert department.status_code == 400
    assert department.json()["error"] == "Missing required fields"
    assert employee.status_code == 400
    assert employee.json()["message"] == "Missing: role"


def test_create_department_strips_name(api_client):
    response = api_client.post(
        "/api/departments", json={"name": "  Legal ", "description": "d", "manager": "m"}
    )

    assert response.json()["data"]["name"] == "Legal"


def test_rename_department_to_existing_name_conflicts(api_client):
    response = api_client.put("/api/departments/2", json={"name": " ENGINEERING "})

    assert response.status_code == 409
    assert api_client.get("/api/departments/2").json()["data"]["name"] == "Product"


def test_rename_department_keeps_own_name_and_strips(api_client):
    same = api_client.put("/api/departments/2", json={"name": "product"})
    renamed = api_client.put("/api/departments/2", json={"name": "  Platform  "})

    assert same.status_code == 200
    assert renamed.json()["data"]["name"] == "Platform"


def test_record_responses_rely_on_request_id_header(api_client):
    response = api_client.get("/api/departments")

    assert "requestId" not in response.json()
    assert response.headers["X-Request-ID"]
