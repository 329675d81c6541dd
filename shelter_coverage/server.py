#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Flask Server

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Lightweight Flask server between the map's draw toolbar and
the analysis. Receives draw events, returns analysis results.

Key Interactions:
- Loads the population and shelter datasets once at startup (DataLoader)
- Holds one DrawSession (current shape + live result)
- Created / edited events -> DrawSession.analyze; deleted -> clear

Navigation Guide:
- ROUTES: API endpoints (/api/config, /api/population, /api/shape, ...)
- STARTUP: Server initialization and data loading

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging
import sys

from flask import Flask, jsonify, request
from flask_cors import CORS

from shelter_coverage.config_types import CONFIG, get_frontend_config
from shelter_coverage.containment import get_strategy
from shelter_coverage.coordinates import CoordinateNormalizer
from shelter_coverage.data_loader import DataLoader
from shelter_coverage.population_layer import PopulationLayer, build_population_layer
from shelter_coverage.session import DrawSession
from shelter_coverage.shapes import QueryShape, ShapeError, parse_shape

# ═══════════════════════════════════════════════════════════════════════════
# 🔧 CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

DEFAULT_DATA_DIR = Path(CONFIG.datasets.data_dir)

SERVER_HOST = CONFIG.server.host
SERVER_PORT = CONFIG.server.port

EVENT_CREATED = "created"
EVENT_EDITED = "edited"

# ═══════════════════════════════════════════════════════════════════════════
# 🌐 FLASK APPLICATION
# ═══════════════════════════════════════════════════════════════════════════

app = Flask(__name__)
CORS(app)

# Services - initialized on startup
data_loader: Optional[DataLoader] = None
session: Optional[DrawSession] = None
population_layer: Optional[PopulationLayer] = None

logger = logging.getLogger(__name__)


def _not_initialized():
    return jsonify({"error": "Server not initialized"}), 500


# ═══════════════════════════════════════════════════════════════════════════
# 🛣️ API ROUTES
# ═══════════════════════════════════════════════════════════════════════════


@app.route("/api/config")
def get_config() -> Dict[str, Any]:
    """Frontend configuration (projection, containment strategy, colours)."""
    return jsonify(get_frontend_config())


@app.route("/api/data/info")
def get_data_info() -> Dict[str, Any]:
    """Loaded dataset files, timestamps and record counts."""
    if data_loader is None:
        return _not_initialized()
    return jsonify(data_loader.get_data_info())


@app.route("/api/population")
def get_population() -> Dict[str, Any]:
    """
    Population overlay as a GeoJSON FeatureCollection.

    Each feature carries 'population' and 'fillColor' properties.
    """
    if population_layer is None:
        return _not_initialized()
    return jsonify(population_layer.geojson)


@app.route("/api/analysis")
def get_analysis() -> Dict[str, Any]:
    """The live analysis result (the cleared result when no shape is drawn)."""
    if session is None:
        return _not_initialized()
    return jsonify(session.result.to_dict(CONFIG.display))


@app.route("/api/shape", methods=["POST"])
def shape_event() -> Dict[str, Any]:
    """
    Handle a shape created / edited event from the draw toolbar.

    Request Body:
        {
            "event": "created" | "edited",
            "shape": {...}            # or "shapes": [{...}, ...] for edits
        }

    Returns:
        Analysis result of the (last) shape.
    """
    if session is None:
        return _not_initialized()

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    event = str(data.get("event", EVENT_CREATED)).lower()
    if event not in (EVENT_CREATED, EVENT_EDITED):
        return jsonify({"error": f"Unknown event '{event}'"}), 400

    raw_shapes = data.get("shapes")
    if raw_shapes is None:
        raw_shapes = [data.get("shape")]
    if not isinstance(raw_shapes, list) or not raw_shapes:
        return jsonify({"error": "'shapes' must be a non-empty list"}), 400

    try:
        shapes: List[QueryShape] = [parse_shape(s) for s in raw_shapes]
    except ShapeError as e:
        return jsonify({"error": f"Invalid shape: {e}"}), 400

    if event == EVENT_CREATED:
        # Only one shape is live at a time; the last one drawn wins
        result = session.on_created(shapes[-1])
    else:
        result = session.on_edited(shapes)

    return jsonify(result.to_dict(CONFIG.display))


@app.route("/api/shape", methods=["DELETE"])
def shape_deleted() -> Dict[str, Any]:
    """Shape deleted on the map: reset to the cleared result."""
    if session is None:
        return _not_initialized()
    return jsonify(session.on_deleted().to_dict(CONFIG.display))


@app.route("/api/clear", methods=["POST"])
def clear_analysis() -> Dict[str, Any]:
    """'Clear analysis' button: same as deleting the shape."""
    if session is None:
        return _not_initialized()
    return jsonify(session.clear().to_dict(CONFIG.display))


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 SERVER INITIALIZATION
# ═══════════════════════════════════════════════════════════════════════════


def initialize_services(data_dir: Path) -> bool:
    """
    Load the datasets and create the draw session.

    Args:
        data_dir: Directory containing the population and shelter files

    Returns:
        True if initialization successful, False otherwise.
    """
    global data_loader, session, population_layer

    try:
        logger.info(f"🚀 Initializing services from: {data_dir}")

        normalizer = CoordinateNormalizer(CONFIG.projection)
        strategy = get_strategy(
            CONFIG.containment.strategy, CONFIG.containment.earth_radius_m
        )

        data_loader = DataLoader(data_dir)
        population_records = data_loader.get_population_records()

        session = DrawSession(
            population_records,
            data_loader.get_shelter_records(),
            normalizer=normalizer,
            strategy=strategy,
        )
        population_layer = build_population_layer(population_records, normalizer)

        logger.info(f"✅ Loaded {len(population_records)} population areas")
        logger.info(f"✅ Loaded {len(data_loader.get_shelter_records())} shelters")
        logger.info(f"✅ Containment strategy: {strategy.name}")

        return True

    except Exception as e:
        logger.error(f"❌ Failed to initialize services: {e}")
        return False


def main() -> None:
    """Main entry point - initialize and start server."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

    # Get data directory from command line or use default
    if len(sys.argv) > 1:
        data_dir = Path(sys.argv[1])
    else:
        data_dir = DEFAULT_DATA_DIR

    if not initialize_services(data_dir):
        logger.error("Failed to initialize. Check data files exist.")
        sys.exit(1)

    logger.info(f"🌐 Starting server at http://{SERVER_HOST}:{SERVER_PORT}")
    app.run(host=SERVER_HOST, port=SERVER_PORT, debug=False)


if __name__ == "__main__":
    main()
