from fastapi.testclient import TestClient
from tabclip.main import app

client = TestClient(app)

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_convert_csv_upload():
    files = [("files", ("test.csv", b"name,city\nPaul,Lyon\n", "text/csv"))]
    r = client.post("/convert", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["html"] == (
        "<table><tr><td>name</td><td>city</td></tr>"
        "<tr><td>Paul</td><td>Lyon</td></tr></table>"
    )
    assert data["sources"][0]["delimiter"] == ","
    assert data["sources"][0]["resolution"] == "extension"
    assert data["sources"][0]["records"] == 2

def test_convert_latin1_csv_upload():
    # Include a Latin-1 character to force non-ASCII handling
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")

    files = [("files", ("test.csv", raw, "text/csv"))]
    r = client.post("/convert", files=files)
    assert r.status_code == 200

    data = r.json()
    assert "<td>Montréal</td>" in data["html"]
    assert "\ufffd" not in data["html"]
    assert data["sources"][0]["resolution"] == "extension"
    assert data["sources"][0]["encoding"] != "utf-8"

def test_convert_sniffs_latin1_upload():
    # Latin-1 bytes force the non-UTF-8 decoding path
    raw = "name\tcity\nPaul\tMontréal\n".encode("latin-1")

    files = [("files", ("cities.txt", raw, "text/plain"))]
    r = client.post("/convert", files=files)
    assert r.status_code == 200

    data = r.json()
    assert "<td>Montréal</td>" in data["html"]
    assert data["sources"][0]["delimiter"] == "\t"
    assert data["sources"][0]["resolution"] == "content"
    assert data["sources"][0]["encoding"] != "utf-8"

def test_convert_joined_uploads():
    files = [
        ("files", ("a.csv", b"1,2\n", "text/csv")),
        ("files", ("b.tsv", b"3\t4\n", "text/tab-separated-values")),
    ]
    r = client.post("/convert", files=files, params={"join": "true"})
    assert r.status_code == 200
    assert r.json()["html"] == (
        "<table><tr><td>1</td><td>2</td></tr><tr><td>3</td><td>4</td></tr></table>"
    )

def test_convert_rejects_unknown_format():
    files = [("files", ("a.csv", b"1,2\n", "text/csv"))]
    r = client.post("/convert", files=files, params={"format": "xml"})
    assert r.status_code == 422
    assert r.json()["detail"] == "unsupported format: xml"

def test_convert_reports_unknown_content():
    files = [("files", ("notes.txt", b"hello world\n", "text/plain"))]
    r = client.post("/convert", files=files)
    assert r.status_code == 422
    assert r.json()["detail"] == "unknown format"

def test_convert_prefer_breaks_tie():
    files = [("files", ("notes.txt", b"hello world\n", "text/plain"))]
    r = client.post("/convert", files=files, params={"prefer": "csv"})
    assert r.status_code == 200
    assert r.json()["html"] == "<table><tr><td>hello world</td></tr></table>"
