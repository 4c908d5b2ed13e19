"""Default configurations for code-health-analyzer."""

# Directories never analyzed (matched by base name)
DEFAULT_EXCLUDE_DIRS = ["vendor", "testdata"]

# Go source handling
GO_FILE_SUFFIX = ".go"
GO_TEST_FILE_SUFFIX = "_test.go"
GO_MOD_FILE = "go.mod"

# Report outputs
DEFAULT_JSON_REPORT = "code_health_report.json"
DEFAULT_CONFIG_FILE = ".code-health.yaml"

# Report formats accepted by the CLI
REPORT_FORMATS = ("console", "json", "both")
