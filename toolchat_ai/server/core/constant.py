PROJECT_NAME = "ToolChat-AI"
API_V1_STR = "/api/v1"
SCHEMA_VERSION = "v1"
