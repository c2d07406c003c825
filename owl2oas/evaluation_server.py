"""Minimal HTTP server returning a fixed JSON-LD sample for client evaluation."""
from __future__ import annotations

from pathlib import Path

from flask import Flask, Response

SAMPLE_PATH = Path(__file__).resolve().parent / "data" / "rec-data-single.jsonld"


def load_sample(path: Path = SAMPLE_PATH) -> str:
    return path.read_text(encoding="utf-8")


def create_app(sample_path: Path = SAMPLE_PATH) -> Flask:
    app = Flask(__name__)
    sample = load_sample(sample_path)

    @app.route("/api/O2OEval", methods=["GET"])
    def o2o_eval() -> Response:
        return Response(sample, mimetype="application/json")

    return app


app = create_app()

if __name__ == "__main__":
    app.run(debug=True)
