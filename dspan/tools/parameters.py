"""
========================================================================================================================
Parameters Module
========================================================================================================================
Module for dealing with the generator and trial parameters

Classes
-------
ParameterSet 	 - represent/manage hierarchical parameter sets

Functions
---------
validate_keys - raise an error if a required key is missing from a parameter dictionary
default_generator_parameters - ParameterSet holding the constants of the constrained digit generator
load_parameters - easiest way to create a ParameterSet from a dictionary or a dictionary file
========================================================================================================================
"""
import ast
import collections.abc
import os

from dspan.tools.utils import logger

logger = logger.get_logger(__name__)

# constants of the constrained search, see dspan.tasks.digit_span
generator_defaults = {
    'max_attempts': 1000,
    'min_separation': 4,
    'count_limit_threshold': 15,
    'max_repeats': 2,
}


##########################################################################################
def validate_keys(dictionary, required_keys=None, accepted_keys=None):
    """
    Raise an error if at least one key in `required_keys` is not found in `dictionary`, or if `dictionary` holds a
    key that is not in `accepted_keys`.
    :param dictionary: [dictionary or ParameterSet object]
    :param required_keys:
    :param accepted_keys:
    :return:
    """
    for k in required_keys or []:
        if k not in dictionary:
            raise KeyError('Required parameter {} not found in parameter set {}'.format(k, str(dictionary)))

    if accepted_keys is None:
        return

    for k in dictionary:
        if k not in accepted_keys:
            raise KeyError('Unknown parameter {}, accepted parameters are {}'.format(k, list(accepted_keys)))


def default_generator_parameters(**modifications):
    """
    Parameters of the constrained digit generator, with optional modifications
    :param modifications: [key=value] entries replacing the defaults
    :return: ParameterSet
    """
    validate_keys(modifications, accepted_keys=generator_defaults)
    parameters = ParameterSet(dict(generator_defaults))
    parameters.replace_values(**modifications)
    return parameters


def load_parameters(parameters_url, **modifications):
    """
    Load a ParameterSet from a dictionary or from a url to a text file with a parameter dictionary.

    :param parameters_url: [str] full path to file, or dict
    :param modifications: [path=value], where path is a . (dot) delimited path to
    a parameter in the  parameter tree rooted in this ParameterSet instance
    :return: ParameterSet
    """
    parameters = ParameterSet(parameters_url)
    parameters.replace_values(**modifications)

    return parameters


#########################################################################################
class ParameterSet(dict):
    """
    Class to manage complex parameter sets.

    Usage example:

        > generator = ParameterSet({'max_attempts': 1000, 'min_separation': 4})
        > trial = ParameterSet({'span': 6, 'mode': 'forward'})
        > P = ParameterSet({'generator': generator, 'trial': trial})
        > P.generator.max_attempts
        1000
        > P['trial.mode']
        'forward'
    """

    @staticmethod
    def read_from_file(pth, filename):
        """
        Import parameter dictionary stored as a text file. The
        file must hold a python dictionary literal, i.e. {'key1': value1, ...}
        :param pth: path
        :param filename:
        :return: dict
        """
        if not os.path.exists(pth):
            raise FileNotFoundError("Incorrect path {}".format(pth))

        with open(os.path.join(pth, filename), 'r') as fi:
            contents = fi.read()
        return ast.literal_eval(contents)

    def __init__(self, initializer):
        """

        :param initializer: parameters dictionary, or string locating the full path of text file with
        parameters dictionary written in standard format
        :return: ParameterSet
        """
        super().__init__()

        if isinstance(initializer, str):
            if not os.path.isfile(initializer):
                raise FileNotFoundError("Parameter file {} not found".format(initializer))
            pth = os.path.dirname(initializer) or os.path.abspath('')
            initializer = ParameterSet.read_from_file(pth, os.path.basename(initializer))

        if isinstance(initializer, dict):
            for k, v in list(initializer.items()):
                if isinstance(v, ParameterSet):
                    dict.__setitem__(self, k, v)
                elif isinstance(v, dict):
                    dict.__setitem__(self, k, ParameterSet(v))
                else:
                    dict.__setitem__(self, k, v)
        else:
            raise TypeError("initializer must be either a string specifying "
                            "the full path of the parameters file, "
                            "or a parameters dictionary")

    def __eq__(self, other):
        """
        Equality check of ParameterSet objects, done by converting both to dictionaries.
        :param other:
        :return:
        """
        if not isinstance(other, dict):
            return False
        if isinstance(other, ParameterSet):
            other = other.as_dict()
        return self.as_dict() == other

    __hash__ = None

    def __getattr__(self, name):
        """
        Allow accessing parameters using dot notation.
        """
        try:
            return self[name]
        except KeyError:
            raise AttributeError("ParameterSet has no parameter {}".format(name))

    def __setattr__(self, name, value):
        """
        Allow setting parameters using dot notation.
        """
        self[name] = value

    def __getitem__(self, name):
        """
        Modified get that detects dots '.' in the names and goes down the
        nested tree to find it
        """
        split = name.split('.', 1)
        if len(split) == 1:
            return dict.__getitem__(self, name)
        return dict.__getitem__(self, split[0])[split[1]]

    def __contains__(self, name):
        try:
            self[name]
        except (KeyError, TypeError, AttributeError):
            return False
        return True

    def __setitem__(self, name, value):
        """
        Modified set that detects dots '.' in the names and goes down the
        nested tree to set it, creating intermediate ParameterSets when needed
        """
        if isinstance(value, dict) and not isinstance(value, ParameterSet):
            value = ParameterSet(value)

        split = name.split('.', 1)
        if len(split) == 1:
            dict.__setitem__(self, name, value)
            return
        try:
            ps = dict.__getitem__(self, split[0])
        except KeyError:
            ps = ParameterSet({})
            dict.__setitem__(self, split[0], ps)
        ps[split[1]] = value

    def update(self, E=(), **F):
        """
        Update ParameterSet with dictionary entries
        """
        if isinstance(E, collections.abc.Mapping):
            for k in E:
                self[k] = E[k]
        else:
            for (k, v) in E:
                self[k] = v
        for k in F:
            self[k] = F[k]

    def save(self, url):
        """
        Write the ParameterSet to a text file, readable with `load_parameters`
        :param url: full path + filename
        """
        if not url:
            raise ValueError("Please provide url")

        with open(url, 'w') as fp:
            fp.write(self.pretty())
        logger.info("Parameters saved to {}".format(url))

    def pretty(self, indent='   '):
        """
        Return a string representing the structure of the `ParameterSet`; evaluating it recreates the object.
        :param indent: indentation type
        :return: string
        """

        def walk(d, ind):
            s = []
            for k, v in list(d.items()):
                if hasattr(v, 'items'):
                    s.append('%s"%s": {' % (ind, k))
                    s.append(walk(v, ind + indent))
                    s.append('%s},' % ind)
                else:
                    s.append('%s"%s": %r,' % (ind, k, v))
            return '\n'.join(s)

        return '{\n' + walk(self, indent) + '\n}'

    def as_dict(self):
        """
        Return a copy of the `ParameterSet` tree structure as a nested dictionary.
        """
        tmp = {}
        for key in self:
            value = dict.__getitem__(self, key)
            if isinstance(value, ParameterSet):
                tmp[key] = value.as_dict()
            else:
                tmp[key] = value
        return tmp

    def replace_values(self, **args):
        """
        This expects its arguments to be in the form path=value, where path is a
        . (dot) delimited path to a parameter in the parameter tree rooted in
        this ParameterSet instance.
        """
        for k in list(args.keys()):
            self[k] = args[k]
