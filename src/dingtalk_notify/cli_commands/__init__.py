"""CLI command groups for dingtalk-notify."""
