"""erreurs

Rôle
	Exceptions levées par le package.

	- `InvalidArgument` : entrées/options/dimensions invalides (détectées avant
	  ou pendant le calcul). Hérite de `ValueError` pour rester compatible avec
	  le reste du code qui attrape `ValueError`.
	- `ComputationError` : échec de la propagation avant (vecteur d'entrée mal
	  formé, valeur non finie). Remonte tel quel jusqu'à l'appelant.
"""


class RetropropError(Exception):
	"""Classe de base des erreurs du package."""


class InvalidArgument(RetropropError, ValueError):
	"""Argument invalide (exemples, options, dimensions des matrices)."""


class ComputationError(RetropropError, RuntimeError):
	"""Erreur pendant la propagation dans le réseau."""
