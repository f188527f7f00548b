"""Services — managed blocks, file deployment, package installs."""
