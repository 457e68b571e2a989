"""reseau

Rôle
	Décrit un réseau de neurones entièrement connecté (MLP) et réalise la
	propagation avant.

	Ce module ne fait *pas* d'apprentissage : les gradients sont calculés
	dans `backpp.py` à partir de ce que retourne `propagate()`.

Structure
	- `couches` : nombre de neurones par couche, de l'entrée vers la sortie
	  ex. [2, 3, 1] = 2 entrées, 3 neurones cachés, 1 sortie
	- `poids` : une matrice par paire de couches adjacentes
		poids[j] relie la couche j à la couche j+1
		taille (couches[j+1], couches[j] + 1), colonne 0 = biais

Propagation
	Pour chaque couche j > 0 :
		raw_j    = poids[j-1] @ [1, values_{j-1}]
		values_j = sigmoide(raw_j)
	La couche d'entrée a raw = values = x. Les `values` ne contiennent jamais
	l'unité de biais.

Erreurs
	`propagate` lève `ComputationError` quand l'entrée a la mauvaise taille,
	contient une valeur non numérique ou non finie (NaN, inf), ou quand une
	couche produit une valeur non finie.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import List, Sequence

from retroprop import matrice
from retroprop.config import POIDS_MAX, POIDS_MIN, PRECISION_AFFICHAGE
from retroprop.erreurs import ComputationError, InvalidArgument
from retroprop.fct_activation import derivee_vecteur, sigmoide_vecteur
from retroprop.matrice import Matrix, Vector


@dataclass
class Activation:
	"""Valeurs d'une couche pour un exemple.

	Attributs
		raw : valeurs brutes (pré-activation)
		values : valeurs activées (sans biais)
	"""

	raw: Vector
	values: Vector


class Reseau:
	"""Réseau entièrement connecté.

	Si `poids` n'est pas fourni, les poids sont tirés uniformément dans
	[poids_min, poids_max] avec un générateur local (répétable avec `seed`).
	"""

	# ==================== __init__ =========================
	def __init__(
		self,
		couches: Sequence[int],
		poids: Sequence[Matrix] | None = None,
		poids_min: float = POIDS_MIN,
		poids_max: float = POIDS_MAX,
		seed: int | None = None,
	):
		self.couches = [int(n) for n in couches]
		if len(self.couches) == 0:
			raise InvalidArgument("Le réseau doit contenir au moins une couche.")
		if any(n <= 0 for n in self.couches):
			raise InvalidArgument("Toutes les couches doivent avoir au moins un neurone.")

		if poids is None:
			rng = random.Random(seed)
			p_min, p_max = float(poids_min), float(poids_max)
			self.poids = [
				[[rng.uniform(p_min, p_max) for _ in range(n_src + 1)] for _ in range(n_dst)]
				for n_src, n_dst in zip(self.couches[:-1], self.couches[1:])
			]
		else:
			self._validate_poids(poids)
			self.poids = matrice.clone_weights(poids)

	# ==================== _validate_poids =========================
	def _validate_poids(self, poids: Sequence[Matrix]) -> None:
		"""Vérifie qu'il y a une matrice par paire de couches, de la bonne taille."""
		if len(poids) != len(self.couches) - 1:
			raise InvalidArgument(
				f"Il faut {len(self.couches) - 1} matrices de poids pour {len(self.couches)} couches, "
				f"mais {len(poids)} ont été fournies."
			)
		for j, W in enumerate(poids):
			attendu = (self.couches[j + 1], self.couches[j] + 1)
			if matrice.shape(W) != attendu:
				raise InvalidArgument(
					f"Couche {j}: W doit être ({attendu[0]}x{attendu[1]}) (biais inclus), "
					f"mais est {matrice.shape_str(W)}."
				)

	@property
	def weights(self) -> List[Matrix]:
		"""Alias anglais de `poids` (lecture seule par convention)."""
		return self.poids

	@property
	def n_in(self) -> int:
		return self.couches[0]

	@property
	def n_out(self) -> int:
		return self.couches[-1]

	# ==================== propagate =========================
	def propagate(self, x: Sequence[float]) -> List[Activation]:
		"""Propagation avant complète.

		Retourne une `Activation` par couche (entrée incluse).
		Lève `ComputationError` si x n'a pas la taille de la couche d'entrée,
		si x contient une valeur non finie (NaN, inf) ou si une valeur non
		finie apparaît après activation.
		"""
		if len(x) != self.n_in:
			raise ComputationError(f"Le vecteur d'entrée doit avoir {self.n_in} valeurs, mais en a {len(x)}.")
		try:
			values = [float(v) for v in x]
		except (TypeError, ValueError) as exc:
			raise ComputationError(f"Vecteur d'entrée invalide: {exc}") from exc
		if not all(math.isfinite(v) for v in values):
			raise ComputationError("Le vecteur d'entrée contient une valeur non finie (NaN ou infini).")

		activations = [Activation(raw=list(values), values=list(values))]
		for j, W in enumerate(self.poids):
			raw = matrice.matvec(W, matrice.add_bias_unit(values))
			try:
				values = sigmoide_vecteur(raw)
			except (OverflowError, ZeroDivisionError) as exc:
				raise ComputationError(f"Couche {j + 1}: activation impossible ({exc}).") from exc
			if not all(math.isfinite(v) for v in values):
				raise ComputationError(f"Couche {j + 1}: valeur non finie après activation.")
			activations.append(Activation(raw=raw, values=values))
		return activations

	# ==================== derivee =========================
	def derivee(self, raw: Sequence[float]) -> Vector:
		"""Dérivée de la sigmoïde appliquée à des valeurs brutes."""
		return derivee_vecteur(raw)

	# ==================== avec_poids =========================
	def avec_poids(self, poids: Sequence[Matrix]) -> "Reseau":
		"""Copie du réseau (même topologie) avec d'autres poids."""
		return Reseau(self.couches, poids=poids)

	# ==================== lignes =========================
	def lignes(self, precision: int = PRECISION_AFFICHAGE) -> List[str]:
		"""Lignes d'affichage des matrices de poids."""
		out = [f"Réseau {self.couches} (sigmoïde)"]
		for j, W in enumerate(self.poids):
			out.append(f"W{j + 1} {matrice.shape_str(W)} =")
			out.extend("\t" + line for line in matrice.matrix_lines(W, precision=precision))
		return out

	# ==================== affiche =========================
	def affiche(self, precision: int = PRECISION_AFFICHAGE) -> None:
		"""Affiche les poids du réseau."""
		print("\n".join(self.lignes(precision)))
