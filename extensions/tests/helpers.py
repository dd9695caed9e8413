from core.models import Menu
from extensions.models import Extension

PAGE_SOURCE = """<template>
  <div class="report">{{ title }}</div>
</template>

<script setup>
const title = ref('Sales report')
</script>

<style scoped>
.report { padding: 1rem; }
</style>
"""

WIDGET_SOURCE = """<template>
  <span class="badge">{{ count }}</span>
</template>

<script>
export default {
  data() {
    return { count: 3 }
  }
}
</script>
"""


def make_menu(path="/reports", label="Reports", **kwargs):
    return Menu.objects.create(path=path, label=label, **kwargs)


def make_page(menu=None, name="Sales report", code=PAGE_SOURCE, **kwargs):
    return Extension.objects.create(
        name=name, type=Extension.TYPE_PAGE, code=code, menu=menu, **kwargs
    )


def make_widget(name="Counter", code=WIDGET_SOURCE, **kwargs):
    return Extension.objects.create(name=name, type=Extension.TYPE_WIDGET, code=code, **kwargs)
