"""Exception hierarchy shared by the provisioning components."""


class ProvisionerError(Exception):
    """Base exception for provisioning operations."""
    pass


class ValidationError(ProvisionerError):
    """Generation or batch parameters are malformed."""
    pass


class EntropyError(ProvisionerError):
    """The secure random source could not supply a seed."""
    pass


class VaultError(ProvisionerError):
    """A secret vault call failed."""
    pass
