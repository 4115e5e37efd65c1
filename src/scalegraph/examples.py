"""
Example scale family for demos and tests.

Builds "Skala Asli - Skala Kepercayaan Diri" (3 dimensions, 10 items, with
baseline rubrics) and two canned adaptation results, Gen-Z and Boomer, in
the shape the generative service returns them.
"""
from typing import Any, Dict, List, Sequence, Tuple

from scalegraph.assembler import assemble, branch_node_id
from scalegraph.layout import next_branch_position
from scalegraph.model import Dimension, Item, Position, ScaleNode
from scalegraph.store import ScaleStore


EXAMPLE_ROOT_ID = "skala-asli"
EXAMPLE_ROOT_NAME = "Skala Asli - Skala Kepercayaan Diri"

FIRST_PERSON = "Sudut pandang orang pertama"

# (dimension, [(text, baseline_rubric), ...])
_ROOT_ITEMS: List[Tuple[str, List[Tuple[str, List[str]]]]] = [
    ("Kepercayaan Diri", [
        ("Saya merasa percaya diri dalam menghadapi tantangan baru",
         ["Kepercayaan diri", "Menghadapi tantangan", "Merasa", "Konteks: Situasi baru", FIRST_PERSON]),
        ("Saya merasa bernilai dan dihargai oleh orang lain",
         ["Nilai diri", "Dihargai", "Merasa", "Oleh orang lain", FIRST_PERSON]),
        ("Saya dapat mengatasi masalah dengan baik dan tenang",
         ["Mengatasi masalah", "Ketenangan", "Dapat", FIRST_PERSON]),
    ]),
    ("Regulasi Emosi", [
        ("Saya mampu mengekspresikan perasaan saya dengan jelas",
         ["Ekspresi perasaan", "Kejelasan", "Mampu", FIRST_PERSON]),
        ("Saya merasa nyaman ketika berinteraksi dengan orang baru",
         ["Kenyamanan", "Interaksi sosial", "Merasa", "Konteks: Orang baru", FIRST_PERSON]),
        ("Saya dapat menerima kritik dengan sikap terbuka",
         ["Penerimaan kritik", "Keterbukaan", "Dapat", FIRST_PERSON]),
        ("Saya mampu mengelola stres dengan efektif",
         ["Pengelolaan stres", "Efektivitas", "Mampu", FIRST_PERSON]),
    ]),
    ("Optimisme", [
        ("Saya merasa optimis tentang masa depan saya",
         ["Optimisme", "Merasa", "Waktu: Masa depan", FIRST_PERSON]),
        ("Saya merasa puas dengan pencapaian hidup saya sejauh ini",
         ["Kepuasan", "Pencapaian Hidup", "Merasa", "Sudut Pandang Orang Pertama", "Waktu: Sejauh Ini"]),
        ("Saya merasa memiliki tujuan hidup yang jelas",
         ["Tujuan hidup", "Merasa", FIRST_PERSON]),
    ]),
]


def build_example_root() -> ScaleNode:
    """Root node "skala-asli" at (100, 250). Item ids are "1" to "10"."""
    dimensions = []
    n = 1
    for dim_name, entries in _ROOT_ITEMS:
        items = []
        for text, rubric in entries:
            items.append(Item(
                item_id=str(n),
                origin_item_id=str(n),
                text=text,
                baseline_rubric=rubric,
                current_rubric=rubric,
            ))
            n += 1
        dimensions.append(Dimension(name=dim_name, items=items))

    return ScaleNode.root(
        id=EXAMPLE_ROOT_ID,
        name=EXAMPLE_ROOT_NAME,
        position=Position(100, 250),
        dimensions=dimensions,
    )


def build_example_adaptation(scale_name: str,
                             dimensions: Sequence[Tuple[str, Sequence[Any]]]) -> Dict[str, Any]:
    """
    Build an adaptation result payload.

    Each dimension entry is (name, items); an item is either a text or a
    (text, current_rubric) pair.
    """
    payload_dims = []
    for name, items in dimensions:
        payload_items = []
        for entry in items:
            if isinstance(entry, str):
                payload_items.append({"text": entry})
            else:
                text, rubric = entry
                payload_items.append({"text": text, "current_rubric": list(rubric)})
        payload_dims.append({"name": name, "items": payload_items})
    return {"scale_name": scale_name, "dimensions": payload_dims}


def build_genz_adaptation() -> Dict[str, Any]:
    return build_example_adaptation("Skala Gen-Z - Skala Kepercayaan Diri", [
        ("Kepercayaan Diri & Keberanian", [
            ("Saya berani mencoba hal baru tanpa ragu",
             ["Keberanian", "Mencoba hal baru", "Tanpa keraguan", FIRST_PERSON]),
            ("Saya merasa dihargai dan berarti di lingkungan saya",
             ["Nilai diri", "Dihargai", "Merasa", "Konteks: Lingkungan", FIRST_PERSON]),
            ("Saya bisa mengatasi masalah dengan kepala dingin dan percaya diri",
             ["Mengatasi masalah", "Ketenangan", "Kepercayaan diri", "Bisa", FIRST_PERSON]),
        ]),
        ("Regulasi Emosi & Interaksi", [
            ("Saya bisa mengekspresikan perasaan saya secara jujur dan jelas",
             ["Ekspresi perasaan", "Kejujuran", "Kejelasan", "Bisa", FIRST_PERSON]),
            ("Saya merasa nyaman dan tidak awkward saat bertemu orang baru",
             ["Kenyamanan", "Tidak canggung", "Merasa", "Konteks: Orang baru", FIRST_PERSON]),
            ("Saya bisa menerima kritik tanpa baper dan belajar darinya",
             ["Penerimaan kritik", "Stabilitas emosi", "Belajar", "Bisa", FIRST_PERSON]),
            ("Saya mampu mengatur stres agar tidak merasa overwhelmed",
             ["Pengelolaan stres", "Menghindari kewalahan", "Mampu", FIRST_PERSON]),
        ]),
        ("Optimisme dan Tujuan (Goals)", [
            ("Saya optimis tentang masa depan dan peluang yang akan datang",
             ["Optimisme", "Peluang", "Merasa", "Waktu: Masa depan", FIRST_PERSON]),
            ("Saya merasa bangga dan puas dengan pencapaian saya sejauh ini",
             ["Kepuasan", "Kebanggaan", "Pencapaian", "Merasa", "Waktu: Sejauh ini", FIRST_PERSON]),
            ("Saya memiliki tujuan hidup atau goals yang jelas untuk dicapai",
             ["Tujuan hidup", "Goals", "Kejelasan", "Memiliki", FIRST_PERSON]),
        ]),
    ])


def build_boomer_adaptation() -> Dict[str, Any]:
    # Texts only: current rubrics fall back to the inherited baseline
    return build_example_adaptation("Skala Boomer - Skala Kepercayaan Diri", [
        ("Kepercayaan Diri pada Usia Boomer", [
            "Saya merasa percaya diri menghadapi perubahan dan tantangan yang muncul pada usia saya",
            "Saya merasa dihargai dan dianggap berarti oleh keluarga dan komunitas saya",
            "Saya mampu menyelesaikan masalah sehari-hari dan menghadapi situasi sulit dengan tenang",
        ]),
        ("Regulasi Emosi dan Interaksi Sosial", [
            "Saya dapat mengungkapkan perasaan saya kepada keluarga atau teman dengan jujur dan tepat",
            "Saya merasa nyaman saat berinteraksi dengan orang baru, termasuk yang berasal dari generasi berbeda",
            "Saya menerima masukan atau kritik dari orang lain dengan sikap terbuka dan bijaksana",
            "Saya mampu mengelola stres terkait kesehatan, tanggung jawab keluarga, atau perubahan hidup secara efektif",
        ]),
        ("Optimisme dan Makna Hidup", [
            "Saya merasa optimis tentang kualitas hidup dan kesejahteraan saya di masa mendatang",
            "Saya merasa puas dan bangga dengan pencapaian hidup serta peran yang telah saya jalani",
            "Saya memiliki tujuan atau kegiatan yang memberi arti dan semangat pada kehidupan saya saat ini",
        ]),
    ])


def build_example_family() -> ScaleStore:
    """
    A store holding the example root plus its Gen-Z (index 0) and Boomer
    (index 1) branches, assembled without a generative service.
    """
    store = ScaleStore()
    root = store.add(build_example_root())
    for payload in (build_genz_adaptation(), build_boomer_adaptation()):
        index = store.next_branch_index(root.id)
        position = next_branch_position(root, index)
        store.add(assemble(payload, root, position, branch_node_id(root.id, index + 1)))
    store.set_active(root.id)
    return store


__all__ = [
    "EXAMPLE_ROOT_ID",
    "EXAMPLE_ROOT_NAME",
    "build_example_root",
    "build_example_adaptation",
    "build_genz_adaptation",
    "build_boomer_adaptation",
    "build_example_family",
]
