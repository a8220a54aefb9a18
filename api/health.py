from flask import Blueprint, current_app

bp = Blueprint("health", __name__)


@bp.get("/")
def root():
    """
    API entry point
    ---
    tags:
      - Health
    responses:
      200:
        description: Where to find the documentation
    """
    return {"documentation": current_app.config["DOCUMENTATION_URL"]}, 200


@bp.get("/ping")
def ping():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            success:
              type: boolean
              example: true
    """
    return {"success": True}, 200
