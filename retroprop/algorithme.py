"""algorithme

Rôle
	Base commune des algorithmes de calcul de gradient.

	Un algorithme est construit une fois par calcul avec
	(réseau, exemples, options), exécute un seul `run()` puis peut être jeté.

	- `Options` : options figées (seed `delta`, `regularization`, `epsilon`)
	- `Exemple` : couple (entrée, sortie désirée)
	- `Algorithme` : classe de base (fusion des options avec les valeurs par
	  défaut propres à chaque algorithme, normalisation des exemples)
	- `cree_algorithme(nom, ...)` : fabrique qui choisit la variante par son nom

Enregistrement
	Chaque variante s'enregistre avec le décorateur `@enregistre("nom")`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Dict, List, Mapping, Sequence, Tuple, Type

from retroprop import matrice
from retroprop.config import EPSILON_DEFAUT, REGULARISATION_DEFAUT
from retroprop.erreurs import InvalidArgument
from retroprop.matrice import Matrix
from retroprop.reseau import Reseau


@dataclass(frozen=True)
class Exemple:
	"""Exemple d'apprentissage: entrée x et sortie désirée d."""

	entree: Tuple[float, ...]
	sortie: Tuple[float, ...]


@dataclass(frozen=True)
class Options:
	"""Options d'un algorithme.

	Attributs
		delta : matrices initiales de l'accumulateur (mêmes tailles que les
			poids), ou None pour partir de zéro
		regularization : multiplicateur de régularisation (lambda), >= 0
		epsilon : pas des différences finies (gradient numérique seulement)
	"""

	delta: Tuple[Matrix, ...] | None = None
	regularization: float = REGULARISATION_DEFAUT
	epsilon: float = EPSILON_DEFAUT


_NOMS_OPTIONS = {f.name for f in fields(Options)}


# ==================== _normalise_options =========================
def _normalise_options(defaults: Mapping[str, object], options: Mapping[str, object] | Options | None) -> Options:
	"""Fusionne les options fournies avec les valeurs par défaut et les valide."""
	if isinstance(options, Options):
		valeurs = dict(defaults)
		valeurs.update({f.name: getattr(options, f.name) for f in fields(Options)})
	else:
		valeurs = dict(defaults)
		valeurs.update(dict(options or {}))

	inconnues = sorted(set(valeurs) - _NOMS_OPTIONS)
	if inconnues:
		raise InvalidArgument(f"Options inconnues: {', '.join(inconnues)}")

	lambda_ = valeurs.get("regularization", REGULARISATION_DEFAUT)
	if isinstance(lambda_, bool) or not isinstance(lambda_, (int, float)) or not math.isfinite(lambda_):
		raise InvalidArgument(f"regularization doit être un nombre fini, reçu {lambda_!r}.")
	if lambda_ < 0:
		raise InvalidArgument(f"regularization doit être >= 0, reçu {lambda_}.")

	epsilon = valeurs.get("epsilon", EPSILON_DEFAUT)
	if isinstance(epsilon, bool) or not isinstance(epsilon, (int, float)) or not epsilon > 0:
		raise InvalidArgument(f"epsilon doit être un nombre > 0, reçu {epsilon!r}.")

	delta = valeurs.get("delta")
	if delta is not None:
		try:
			delta = tuple(matrice.clone_weights(delta))
		except (TypeError, ValueError) as exc:
			raise InvalidArgument(f"delta doit être une liste de matrices de nombres: {exc}") from exc

	return Options(delta=delta, regularization=float(lambda_), epsilon=float(epsilon))


# ==================== _normalise_exemple =========================
def _normalise_exemple(exemple) -> Exemple:
	"""Accepte un `Exemple`, un dict {input, output} ou un couple (entrée, sortie)."""
	if isinstance(exemple, Exemple):
		return exemple
	if isinstance(exemple, Mapping):
		try:
			entree, sortie = exemple["input"], exemple["output"]
		except KeyError as exc:
			raise InvalidArgument(f"Exemple sans clé {exc}: {exemple!r}") from None
	else:
		try:
			entree, sortie = exemple
		except (TypeError, ValueError):
			raise InvalidArgument(f"Exemple invalide (attendu (entrée, sortie)): {exemple!r}") from None
	try:
		return Exemple(tuple(float(v) for v in entree), tuple(float(v) for v in sortie))
	except (TypeError, ValueError) as exc:
		raise InvalidArgument(f"Exemple invalide: {exc}") from exc


class Algorithme:
	"""Classe de base: lie (réseau, exemples, options).

	Les sous-classes définissent `defaults` et implémentent `run()`.
	"""

	nom: str = ""
	defaults: Dict[str, object] = {}

	# ==================== __init__ =========================
	def __init__(
		self,
		network: Reseau,
		examples: Sequence[object],
		options: Mapping[str, object] | Options | None = None,
		**kwargs,
	):
		self.network = network
		self.examples: List[Exemple] = [_normalise_exemple(e) for e in examples]
		merged = dict(options) if isinstance(options, Mapping) else options
		if kwargs:
			if isinstance(merged, Options):
				merged = {f.name: getattr(merged, f.name) for f in fields(Options)}
			merged = {**(merged or {}), **kwargs}
		self.options = _normalise_options(self.defaults, merged)

	# ==================== create =========================
	@classmethod
	def create(cls, network: Reseau, examples: Sequence[object], options=None, **kwargs) -> "Algorithme":
		"""Fabrique uniforme: `BackPropagation.create(reseau, exemples, {...})`."""
		return cls(network, examples, options, **kwargs)

	# ==================== run =========================
	def run(self) -> List[Matrix]:
		"""Calcule les dérivées (une matrice par matrice de poids)."""
		raise NotImplementedError

	# ==================== _validate =========================
	def _validate(self) -> None:
		"""Vérifications communes avant `run()`.

		- au moins deux couches (entrée + une couche calculée)
		- au moins un exemple
		- dimensions des exemples cohérentes avec le réseau
		- seed `delta` de mêmes tailles que les poids
		"""
		couches = self.network.couches
		if len(couches) < 2:
			raise InvalidArgument("La rétropropagation exige au moins deux couches (entrée + sortie).")
		if len(self.examples) == 0:
			raise InvalidArgument("Aucun exemple: impossible de moyenner les dérivées.")

		for k, exemple in enumerate(self.examples):
			if len(exemple.entree) != couches[0]:
				raise InvalidArgument(
					f"Exemple {k}: l'entrée a {len(exemple.entree)} valeurs, la couche d'entrée en attend {couches[0]}."
				)
			if len(exemple.sortie) != couches[-1]:
				raise InvalidArgument(
					f"Exemple {k}: la sortie a {len(exemple.sortie)} valeurs, la couche de sortie en a {couches[-1]}."
				)

		delta = self.options.delta
		if delta is not None:
			if len(delta) != len(self.network.poids):
				raise InvalidArgument(
					f"delta doit contenir {len(self.network.poids)} matrices, mais en contient {len(delta)}."
				)
			for j, (D, W) in enumerate(zip(delta, self.network.poids)):
				if matrice.shape(D) != matrice.shape(W):
					raise InvalidArgument(
						f"Couche {j}: delta {matrice.shape_str(D)} et poids {matrice.shape_str(W)} de tailles différentes."
					)


_ALGORITHMES: Dict[str, Type[Algorithme]] = {}


# ==================== enregistre =========================
def enregistre(nom: str):
	"""Décorateur: enregistre une variante d'algorithme sous `nom`."""

	def _decorateur(cls: Type[Algorithme]) -> Type[Algorithme]:
		cls.nom = nom
		_ALGORITHMES[nom] = cls
		return cls

	return _decorateur


# ==================== algorithmes_disponibles =========================
def algorithmes_disponibles() -> List[str]:
	return sorted(_ALGORITHMES)


# ==================== cree_algorithme =========================
def cree_algorithme(
	nom: str,
	network: Reseau,
	examples: Sequence[object],
	options: Mapping[str, object] | Options | None = None,
	**kwargs,
) -> Algorithme:
	"""Construit l'algorithme `nom` ("backpropagation", "gradient_numerique")."""
	# Les variantes s'enregistrent à l'import de leur module.
	from retroprop import backpp, gradient_numerique  # noqa: F401

	try:
		cls = _ALGORITHMES[nom]
	except KeyError:
		raise InvalidArgument(
			f"Algorithme inconnu: {nom!r} (disponibles: {', '.join(algorithmes_disponibles())})"
		) from None
	return cls.create(network, examples, options, **kwargs)

