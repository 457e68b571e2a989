"""loader

Rôle
	Lecture des jeux d'exemples au format texte du laboratoire.

Format de ligne
	`label: x1 x2 ...`
	- `label` : entier, converti en sortie désirée one-hot (`convert_label`)
	- `x1 x2 ...` : valeurs d'entrée (la virgule décimale est acceptée),
	  tronquées à `n_in`
	Les lignes vides sont ignorées.
"""

from __future__ import annotations

import random
from collections.abc import Iterator
from pathlib import Path
from typing import List

from retroprop.algorithme import Exemple
from retroprop.erreurs import InvalidArgument


# ==================== convert_label =========================
def convert_label(label: int, nb_sorties: int) -> List[int]:
	"""Convertit un label entier en vecteur one-hot de taille nb_sorties.

	- nb_sorties == 10 : chiffres 1..9 -> positions 0..8, et 0 -> position 9
	- sinon : label 0-based (0 -> position 0)
	"""
	n = int(nb_sorties)
	lab = int(label)
	if n <= 0:
		raise InvalidArgument("nb_sorties doit être >= 1")
	if lab < 0 or lab >= n:
		raise InvalidArgument(f"label {lab} hors bornes pour {n} sorties")

	position = (lab - 1) % 10 if n == 10 else lab
	out = [0] * n
	out[position] = 1
	return out


# ==================== _parse_ligne =========================
def _parse_ligne(line: str, *, n_in: int, nb_sorties: int) -> Exemple:
	"""Parse une ligne `label: x1 x2 ...` -> Exemple."""
	if int(n_in) <= 0:
		raise InvalidArgument("n_in doit être >= 1")

	s = (line or "").strip()
	if ":" not in s:
		raise InvalidArgument(f"Ligne invalide (pas de ':'): {s[:80]!r}")

	left, _sep, right = s.partition(":")
	try:
		label = int(left.strip())
	except ValueError:
		raise InvalidArgument(f"Label invalide sur la ligne: {s[:80]!r}") from None

	tokens = right.split()
	if not tokens:
		raise InvalidArgument(f"Ligne invalide (aucune valeur X): {s[:80]!r}")
	try:
		X_all = [float(t.replace(",", ".")) for t in tokens]
	except ValueError:
		raise InvalidArgument(f"Valeur X invalide sur la ligne: {s[:80]!r}") from None

	if len(X_all) < int(n_in):
		raise InvalidArgument(f"Taille X insuffisante: {len(X_all)} (attendu >= {n_in}) sur la ligne: {s[:80]!r}")

	D = convert_label(label, nb_sorties)
	return Exemple(tuple(X_all[: int(n_in)]), tuple(float(d) for d in D))


# ==================== iter_exemples =========================
def iter_exemples(file_path: Path | str, *, n_in: int, nb_sorties: int) -> Iterator[Exemple]:
	"""Itère sur les exemples d'un fichier (lecture séquentielle)."""
	with open(file_path, "r", encoding="utf-8") as f:
		for raw_line in f:
			line = raw_line.strip()
			if not line:
				continue
			yield _parse_ligne(line, n_in=n_in, nb_sorties=nb_sorties)


# ==================== load_exemples =========================
def load_exemples(
	file_path: Path | str,
	*,
	n_in: int,
	nb_sorties: int,
	seed: int | None = None,
) -> List[Exemple]:
	"""Charge tous les exemples d'un fichier.

	Si `seed` est fourni, l'ordre est mélangé de façon reproductible (le
	contenu reste identique à la lecture séquentielle).
	"""
	exemples = list(iter_exemples(file_path, n_in=n_in, nb_sorties=nb_sorties))
	if seed is not None:
		random.Random(seed).shuffle(exemples)
	return exemples
