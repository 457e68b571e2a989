"""matrice

Rôle
	Opérations d'algèbre linéaire dense sur des listes Python, plus l'affichage
	des matrices de poids et de dérivées (colonne de biais séparée).

Conventions
	- Vector : liste de floats
	- Matrix : liste de listes (une liste par ligne), toutes de même longueur
	- Les fonctions ne modifient jamais leurs arguments : elles retournent
	  toujours de nouvelles listes.
	- Une incompatibilité de dimensions lève `InvalidArgument`.

Matrices de poids
	Une matrice de poids W_j relie la couche j à la couche j+1 :
		- nb lignes   = nb neurones de la couche j+1
		- nb colonnes = nb neurones de la couche j + 1 (colonne 0 = biais)
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

from retroprop.config import PRECISION_AFFICHAGE
from retroprop.erreurs import InvalidArgument


Vector = List[float]
Matrix = List[List[float]]


# ==================== shape =========================
def shape(M: Sequence[Sequence[float]]) -> Tuple[int, int]:
	"""Retourne (nb lignes, nb colonnes).

	Vérifie au passage que toutes les lignes ont la même longueur.
	"""
	rows = len(M)
	cols = len(M[0]) if rows > 0 else 0
	for r, row in enumerate(M):
		if len(row) != cols:
			raise InvalidArgument(f"Matrice irrégulière: la ligne {r} a {len(row)} colonnes au lieu de {cols}.")
	return rows, cols


# ==================== zeros =========================
def zeros(rows: int, cols: int) -> Matrix:
	"""Matrice nulle (rows x cols)."""
	return [[0.0] * cols for _ in range(rows)]


# ==================== zero_weights =========================
def zero_weights(couches: Sequence[int]) -> List[Matrix]:
	"""Une matrice nulle par paire de couches adjacentes (colonne de biais incluse)."""
	return [zeros(couches[j + 1], couches[j] + 1) for j in range(len(couches) - 1)]


# ==================== clone =========================
def clone(M: Sequence[Sequence[float]]) -> Matrix:
	"""Copie profonde d'une matrice (valeurs converties en float)."""
	return [[float(v) for v in row] for row in M]


# ==================== clone_weights =========================
def clone_weights(weights: Sequence[Sequence[Sequence[float]]]) -> List[Matrix]:
	"""Copie profonde d'une liste de matrices."""
	return [clone(W) for W in weights]


# ==================== _check_same_shape =========================
def _check_same_shape(A: Sequence[Sequence[float]], B: Sequence[Sequence[float]], operation: str) -> None:
	shape_a = shape(A)
	shape_b = shape(B)
	if shape_a != shape_b:
		raise InvalidArgument(
			f"{operation} impossible: matrices de tailles différentes {shape_str(A)} et {shape_str(B)}."
		)


# ==================== add =========================
def add(A: Matrix, B: Matrix) -> Matrix:
	"""Additionne deux matrices A + B."""
	_check_same_shape(A, B, "Addition")
	return [[float(a) + float(b) for a, b in zip(row_a, row_b)] for row_a, row_b in zip(A, B)]


# ==================== subtract =========================
def subtract(A: Matrix, B: Matrix) -> Matrix:
	"""Soustrait deux matrices A - B."""
	_check_same_shape(A, B, "Soustraction")
	return [[float(a) - float(b) for a, b in zip(row_a, row_b)] for row_a, row_b in zip(A, B)]


# ==================== scale =========================
def scale(M: Matrix, alpha: float) -> Matrix:
	"""Multiplie une matrice par un scalaire."""
	return [[float(alpha) * float(v) for v in row] for row in M]


# ==================== transpose =========================
def transpose(M: Matrix) -> Matrix:
	"""Transposée de M."""
	rows, cols = shape(M)
	return [[float(M[r][c]) for r in range(rows)] for c in range(cols)]


# ==================== matmul =========================
def matmul(A: Matrix, B: Matrix) -> Matrix:
	"""Produit matriciel A @ B."""
	rows_a, cols_a = shape(A)
	rows_b, cols_b = shape(B)
	if cols_a != rows_b:
		raise InvalidArgument(
			f"Produit impossible: {shape_str(A)} @ {shape_str(B)} (colonnes de A != lignes de B)."
		)

	out = zeros(rows_a, cols_b)
	for i in range(rows_a):
		row_a = A[i]
		out_row = out[i]
		for k in range(cols_a):
			a_ik = float(row_a[k])
			if a_ik == 0.0:
				continue
			row_b = B[k]
			for j in range(cols_b):
				out_row[j] += a_ik * float(row_b[j])
	return out


# ==================== matvec =========================
def matvec(W: Matrix, x: Sequence[float]) -> Vector:
	"""Calcule W @ x (x vecteur colonne).

	W de taille (n_out, n_in), x de taille (n_in) -> sortie de taille (n_out).
	"""
	rows, cols = shape(W)
	if cols != len(x):
		raise InvalidArgument(f"Dimensions incompatibles: {shape_str(W)} @ vecteur de taille {len(x)}.")
	return [sum(float(w) * float(xi) for w, xi in zip(row, x)) for row in W]


# ==================== map_elements =========================
def map_elements(M: Matrix, fn: Callable[[float, int, int], float]) -> Matrix:
	"""Applique fn(valeur, ligne, colonne) sur chaque élément (indices 0-based)."""
	return [[float(fn(float(v), r, c)) for c, v in enumerate(row)] for r, row in enumerate(M)]


# ==================== vec_sub =========================
def vec_sub(a: Sequence[float], b: Sequence[float]) -> Vector:
	"""Soustrait deux vecteurs a - b."""
	if len(a) != len(b):
		raise InvalidArgument(f"Soustraction impossible: vecteurs de tailles {len(a)} et {len(b)}.")
	return [float(ai) - float(bi) for ai, bi in zip(a, b)]


# ==================== vec_mul =========================
def vec_mul(a: Sequence[float], b: Sequence[float]) -> Vector:
	"""Produit élément par élément de deux vecteurs."""
	if len(a) != len(b):
		raise InvalidArgument(f"Produit impossible: vecteurs de tailles {len(a)} et {len(b)}.")
	return [float(ai) * float(bi) for ai, bi in zip(a, b)]


# ==================== to_matrix =========================
def to_matrix(v: Sequence[float]) -> Matrix:
	"""Vecteur -> matrice ligne (1 x n)."""
	return [[float(x) for x in v]]


# ==================== add_bias_unit =========================
def add_bias_unit(v: Sequence[float]) -> Vector:
	"""Ajoute l'unité de biais (constante 1) en tête du vecteur."""
	return [1.0] + [float(x) for x in v]


# ==================== _format_nombre =========================
def _format_nombre(x: float, precision: int) -> str:
	"""Virgule fixe, sauf pour les valeurs non nulles trop petites ou trop grandes."""
	xf = float(x)
	ax = abs(xf)
	if ax != 0.0 and (ax < 10 ** -precision or ax >= 1e6):
		return f"{xf:.{precision}e}"
	return f"{xf:.{precision}f}"


# ==================== matrix_lines =========================
def matrix_lines(W: Sequence[Sequence[float]], precision: int = PRECISION_AFFICHAGE, biais: bool = True) -> List[str]:
	"""Lignes d'affichage d'une matrice de poids ou de dérivées.

	Une ligne par neurone de la couche suivante, toutes les valeurs sur la
	même largeur. Avec `biais`, la colonne 0 est séparée des autres par `|`:

		[  0.10 | -0.20  0.30 ]
	"""
	if len(W) == 0:
		return ["[ ]"]

	cellules = [[_format_nombre(v, precision) for v in row] for row in W]
	largeur = max((len(s) for row in cellules for s in row), default=0)

	out = []
	for row in cellules:
		textes = [s.rjust(largeur) for s in row]
		if biais and len(textes) > 1:
			textes = [textes[0], "|"] + textes[1:]
		out.append("[ " + " ".join(textes) + " ]")
	return out


# ==================== shape_str =========================
def shape_str(M: Sequence) -> str:
	"""Taille "(lignes x colonnes)" pour les messages d'erreur et l'affichage.

	Un vecteur (liste de nombres) est décrit comme une colonne (n x 1).
	"""
	if len(M) == 0:
		return "(0x0)"
	if not isinstance(M[0], (list, tuple)):
		return f"({len(M)}x1)"
	return f"({len(M)}x{len(M[0])})"
