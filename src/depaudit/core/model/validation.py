"""Structural validation of a compact package list.

Performs the following checks, in order, raising on the first failure:

1. **Index validity:** every dependency index is an integer inside the
   package list and strictly smaller than the index of the package listing
   it. Dependencies precede their dependents, so a consumer can check the
   list in one forward pass; self-references and cycles are excluded by the
   same rule.
2. **No duplicate edges:** a package lists each dependency at most once.
3. **Unique identities:** no two packages share ``(name, version, source)``.
4. **Single root:** exactly one package has ``root`` set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from depaudit.exceptions import InvalidGraphError, InvalidRootError

if TYPE_CHECKING:
    from depaudit.core.model.models import Package


def validate_packages(packages: Sequence[Package]) -> None:
    """Validate a package list in the order it would be serialized.

    Args:
        packages: The candidate package list.

    Raises:
        InvalidGraphError: On out-of-bounds, forward, self, duplicate, or
            cyclic dependency indices, or duplicate package identities.
        InvalidRootError: If the number of root packages is not exactly one.
    """
    seen: dict[tuple, int] = {}
    roots: list[int] = []

    for index, pkg in enumerate(packages):
        listed: set[int] = set()
        for dep in pkg.dependencies:
            # bool is an int subclass; True must not stand in for index 1.
            if not isinstance(dep, int) or isinstance(dep, bool):
                raise InvalidGraphError(
                    f"Package {pkg.name!r} {str(pkg.version)!r} has a "
                    f"non-integer dependency index {dep!r}"
                )
            if dep < 0 or dep >= len(packages):
                raise InvalidGraphError(
                    f"Package {pkg.name!r} {str(pkg.version)!r} references "
                    f"index {dep}, outside the package list of length "
                    f"{len(packages)}"
                )
            if dep >= index:
                raise InvalidGraphError(
                    f"Package {pkg.name!r} {str(pkg.version)!r} at index "
                    f"{index} references index {dep}; dependencies must be "
                    f"placed before their dependents"
                )
            if dep in listed:
                raise InvalidGraphError(
                    f"Package {pkg.name!r} {str(pkg.version)!r} lists "
                    f"dependency index {dep} more than once"
                )
            listed.add(dep)

        identity = pkg.identity
        if identity in seen:
            raise InvalidGraphError(
                f"Package {pkg.name!r} {str(pkg.version)!r} from "
                f"{pkg.source} appears at both index {seen[identity]} and {index}"
            )
        seen[identity] = index

        if pkg.root:
            roots.append(index)

    if not roots:
        raise InvalidRootError("No root package: exactly one package must be the root")
    if len(roots) > 1:
        names = ", ".join(f"{packages[i].name!r}" for i in roots)
        raise InvalidRootError(
            f"Multiple root packages ({names}): exactly one package must be the root"
        )
