"""
Settings management for dataset preparation and the classifier
"""


class HyperparameterDefaults(object):
    """
    The settings *supported* by a component and their defaults. Thin wrapper
    around a dict.

    The particular settings used for one run (e.g. read from a YAML file)
    are kept in plain dicts.
    """
    def __init__(self, **defaults):
        self.defaults = dict(defaults)

    def extend(self, other):
        """
        Return a new HyperparameterDefaults combining the settings of this
        instance and `other`. The two must not share any keys.
        """
        overlap = [key for key in other.defaults if key in self.defaults]
        if overlap:
            raise ValueError(
                "Duplicate hyperparameter(s): %s" % " ".join(overlap))
        new = dict(self.defaults)
        new.update(other.defaults)
        return HyperparameterDefaults(**new)

    def with_defaults(self, obj):
        """
        Given a dict of settings, return a new dict with the defaults filled
        in for any missing keys. Unknown keys are an error.
        """
        self.check_valid_keys(obj)
        obj = dict(obj)
        for (key, value) in self.defaults.items():
            if key not in obj:
                obj[key] = value
        return obj

    def subselect(self, obj):
        """
        Filter a dict of settings to the keys defined here.
        """
        return dict(
            (key, value) for (key, value)
            in obj.items()
            if key in self.defaults)

    def check_valid_keys(self, obj):
        """
        Raise ValueError if `obj` has keys not defined here.
        """
        invalid_keys = [
            x for x in obj if x not in self.defaults
        ]
        if invalid_keys:
            raise ValueError(
                "No such parameters: %s. Valid parameters are: %s"
                % (" ".join(invalid_keys), " ".join(self.defaults)))
