"""REST API package for the VM password provisioner."""
