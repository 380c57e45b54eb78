"""Task dependency graph - index, cycle detection and execution waves.

Dependencies are string references to sibling task ids. The graph is
built once from a document's task list: an index from id to position
(first declaration wins), an edge list per id, and the set of duplicate
ids. Both the validator and schedulers consume it.
"""

from collections.abc import Iterator

from loguru import logger

from taskspec.core.exceptions import CircularDependencyError
from taskspec.instructions.models import SpecDocument, TaskEntry


class TaskGraph:
    """
    Directed graph over task ids, with edges to declared dependencies.

    Example:
        >>> graph = TaskGraph.from_document(doc)
        >>> graph.find_cycle()
        ['task1', 'task2', 'task1']
    """

    def __init__(self, tasks: list[TaskEntry]) -> None:
        """
        Build the index and edge list.

        Args:
            tasks: Tasks in declaration order.
        """
        self.tasks = tasks
        self.index: dict[str, int] = {}
        self.duplicates: list[str] = []

        for position, task in enumerate(tasks):
            if task.id in self.index:
                if task.id not in self.duplicates:
                    self.duplicates.append(task.id)
                continue
            self.index[task.id] = position

        self.edges: dict[str, list[str]] = {
            task_id: list(tasks[position].depends_on)
            for task_id, position in self.index.items()
        }

    @classmethod
    def from_document(cls, doc: SpecDocument) -> "TaskGraph":
        return cls(doc.tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.index

    def get(self, task_id: str) -> TaskEntry | None:
        """Get the first task declared with this id."""
        position = self.index.get(task_id)
        return self.tasks[position] if position is not None else None

    # =========================================================================
    # REFERENCES
    # =========================================================================

    def unknown_dependencies(self) -> list[tuple[str, str]]:
        """
        Find dependency ids that name no task.

        Returns:
            (task_id, dependency_id) pairs in declaration order.
        """
        return [
            (task.id, dep)
            for task in self.tasks
            for dep in task.depends_on
            if dep not in self.index
        ]

    def dependents(self, task_id: str) -> list[str]:
        """
        Get tasks that depend on the given task.

        Args:
            task_id: Task identifier.

        Returns:
            List of task ids that declare a dependency on task_id.
        """
        return [tid for tid, deps in self.edges.items() if task_id in deps]

    # =========================================================================
    # CYCLE DETECTION
    # =========================================================================

    def find_cycle(self) -> list[str] | None:
        """
        Detect the first dependency cycle using DFS.

        Roots are tried in declaration order. A node already on the current
        path closes a cycle, reported from its first occurrence through the
        repeat. The visited set is shared across roots, so each node and
        edge is explored once. The traversal keeps its own stack so deep
        dependency chains do not hit the recursion limit.

        Returns:
            Cycle path such as ["a", "b", "a"], or None if acyclic.
        """
        visited: set[str] = set()

        for root in self.index:
            if root in visited:
                continue

            visited.add(root)
            path: list[str] = [root]
            on_path: dict[str, int] = {root: 0}
            stack: list[Iterator[str]] = [iter(self.edges.get(root, []))]

            while stack:
                dep = next(stack[-1], None)
                if dep is None:
                    stack.pop()
                    del on_path[path.pop()]
                    continue

                if dep in on_path:
                    cycle = path[on_path[dep]:] + [dep]
                    logger.debug(f"Dependency cycle found: {' -> '.join(cycle)}")
                    return cycle

                if dep in visited:
                    continue

                visited.add(dep)
                on_path[dep] = len(path)
                path.append(dep)
                stack.append(iter(self.edges.get(dep, [])))

        return None

    # =========================================================================
    # WAVES
    # =========================================================================

    def waves(self) -> list[list[str]]:
        """
        Group tasks into execution waves using topological levels.

        Tasks in the same wave have all known dependencies in earlier
        waves and can run in parallel. Within a wave, tasks are ordered by
        priority, then declaration order. Unknown dependency ids are
        ignored here; the validator reports them.

        Returns:
            List of waves, each a list of task ids.

        Raises:
            CircularDependencyError: If the dependencies contain a cycle.
        """
        cycle = self.find_cycle()
        if cycle:
            raise CircularDependencyError(cycle)

        waves: list[list[str]] = []
        assigned: set[str] = set()
        remaining = list(self.index)

        while remaining:
            wave = [
                task_id for task_id in remaining
                if all(dep in assigned or dep not in self.index for dep in self.edges[task_id])
            ]
            wave.sort(key=lambda tid: (self.tasks[self.index[tid]].priority, self.index[tid]))
            waves.append(wave)
            assigned.update(wave)
            remaining = [task_id for task_id in remaining if task_id not in assigned]

        for i, wave in enumerate(waves):
            logger.debug(f"Wave {i}: {', '.join(wave)}")

        return waves

    def execution_order(self) -> list[str]:
        """
        Get flat list of task ids in execution order.

        Returns:
            Task ids in wave order.
        """
        return [task_id for wave in self.waves() for task_id in wave]


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def build_task_index(tasks: list[TaskEntry]) -> dict[str, int]:
    """Map task id to the position of its first declaration."""
    return TaskGraph(tasks).index


def detect_cycle(tasks: list[TaskEntry]) -> list[str] | None:
    """Convenience function to find the first dependency cycle."""
    return TaskGraph(tasks).find_cycle()
